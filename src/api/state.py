from collections import deque
from typing import Any, Deque, Dict, Optional

from api.backend import BackendAPI
from momentum.config import Settings

# In-memory storage for recent analyses (for display purposes)
recent_analyses: Deque[Dict[str, Any]] = deque(maxlen=100)

settings: Settings = Settings.from_env()

# Pipeline instance shared by the routers; replaced in tests via dependency overrides
backend: Optional[BackendAPI] = BackendAPI.from_settings(settings)
