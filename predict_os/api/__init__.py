from .state import AppState, build_state

__all__ = ["AppState", "build_state"]
