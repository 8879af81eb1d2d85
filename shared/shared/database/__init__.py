from shared.database.locks import acquire_xact_lock, advisory_lock_key
from shared.database.postgres import Base, get_async_session_factory, AsyncSessionFactory
from shared.database.types import UTCDateTime, utcnow

__all__ = [
    "Base",
    "get_async_session_factory",
    "AsyncSessionFactory",
    "acquire_xact_lock",
    "advisory_lock_key",
    "UTCDateTime",
    "utcnow",
]
