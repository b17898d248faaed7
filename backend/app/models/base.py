from datetime import datetime
from sqlalchemy import Column, DateTime, inspect
from ..database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns store."""
    return datetime.utcnow()


class BaseModel(Base):
    __abstract__ = True

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        ident = inspect(self).identity if inspect(self).has_identity else None
        return f"<{type(self).__name__} {ident[0] if ident else 'transient'}>"
