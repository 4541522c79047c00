from teamflow.storage.sql.connection import create_all, create_engine, session_factory
from teamflow.storage.sql.repos import SqlTaskRepository, SqlTeamRepository

__all__ = [
    "SqlTaskRepository",
    "SqlTeamRepository",
    "create_all",
    "create_engine",
    "session_factory",
]
