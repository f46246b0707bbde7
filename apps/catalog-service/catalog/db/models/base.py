"""
Shared SQLAlchemy base and helpers.
"""
from datetime import datetime, UTC

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import declarative_base


def now_utc():
    """Return an aware UTC datetime for default/updated timestamps."""
    return datetime.now(UTC)


# SQLite only auto-increments an INTEGER PRIMARY KEY.
IdentityType = BigInteger().with_variant(Integer(), "sqlite")

# Largest value an identity column can hold (signed 64-bit).
MAX_ID = 2**63 - 1

Base = declarative_base()
