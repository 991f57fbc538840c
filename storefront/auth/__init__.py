"""Authentication package."""
from .session import SessionState, SessionStatus

__all__ = [
    "SessionState",
    "SessionStatus",
]
