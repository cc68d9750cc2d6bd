"""
Per (store, date) serialization for reservation writes.

Two layers are taken, in this order:
- an in-process striped lock, so threads of one worker never interleave
- on PostgreSQL, a transaction-scoped advisory lock, so separate workers and
  hosts serialize too; it is released by the commit or rollback that ends the
  transaction
"""

import hashlib
import logging
import threading
from contextlib import contextmanager
from datetime import date
from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_STRIPES = 64
_local_locks = [threading.Lock() for _ in range(_STRIPES)]


def lock_key(store_id: int, reservation_date: date) -> int:
    """Deterministic signed bigint for pg_advisory_xact_lock."""
    digest = hashlib.sha256(f"reservation:{store_id}:{reservation_date.isoformat()}".encode()).digest()
    return int.from_bytes(digest[:8], "big", signed=True)


@contextmanager
def reservation_lock(db: Session, store_id: int, reservation_date: date):
    """
    Hold the write lock for a store's date while the body checks and writes.

    The body must commit before leaving the block; any exception rolls the
    session back and releases both locks.
    """
    key = lock_key(store_id, reservation_date)
    local = _local_locks[key % _STRIPES]

    with local:
        try:
            if db.get_bind().dialect.name == "postgresql":
                db.execute(text("SELECT pg_advisory_xact_lock(:k)"), {"k": key})
            yield
        except Exception:
            logger.debug(f"Rolling back reservation write for store {store_id} on {reservation_date}")
            db.rollback()
            raise
