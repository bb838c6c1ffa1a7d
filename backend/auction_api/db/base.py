from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase

# Ranges of the Integer and BigInteger columns; larger values never reach the driver.
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass
