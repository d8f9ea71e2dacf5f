"""ClipLink database layer: Base, engine, session, exceptions."""

from cliplink.db.base import Base, ChannelScoped
from cliplink.db.engine import create_engine, create_schema, default_database_url, drop_schema
from cliplink.db.exceptions import ConfigurationError, DatabaseError
from cliplink.db.session import create_session_factory, session_scope

__all__ = [
    "Base",
    "ChannelScoped",
    "create_engine",
    "create_schema",
    "drop_schema",
    "default_database_url",
    "create_session_factory",
    "session_scope",
    "DatabaseError",
    "ConfigurationError",
]
