from api import state
from api.backend import BackendAPI


def get_backend() -> BackendAPI:
    if state.backend is None:
        state.backend = BackendAPI.from_settings(state.settings)
    return state.backend
