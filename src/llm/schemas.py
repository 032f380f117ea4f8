from __future__ import annotations
from typing import Dict
from pydantic import BaseModel, Field, field_validator

class IntentScores(BaseModel):
    scores: Dict[str, float] = Field(default_factory=dict)

    @field_validator("scores")
    @classmethod
    def clamp_scores(cls, v: Dict[str, float]) -> Dict[str, float]:
        # models are not trusted to stay inside [0, 1]
        return {
            str(label).strip().lower(): min(max(float(score), 0.0), 1.0)
            for label, score in v.items()
        }
