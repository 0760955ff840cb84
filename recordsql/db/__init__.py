from .models import StatementResult
from .session import DbSession
from .update import DbHandle, execute_update, must_update, update

__all__ = [
    "DbSession",
    "DbHandle",
    "StatementResult",
    "execute_update",
    "update",
    "must_update",
]
