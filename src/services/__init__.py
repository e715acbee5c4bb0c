from src.services import (
    edit_session,
    session_gate,
    task_filter,
    task_store,
    user_service,
)


__all__ = [
    "edit_session",
    "session_gate",
    "task_filter",
    "task_store",
    "user_service",
]
