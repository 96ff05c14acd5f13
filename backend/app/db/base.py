"""
Declarative base and shared model columns.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(Base):
    """Abstract model with id and audit timestamps."""
    __abstract__ = True
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


def update_values(model, data) -> dict:
    """
    Fields set on an update schema, ready for setattr.

    An explicit null for a NOT NULL column means "leave as is".
    """
    columns = model.__table__.columns
    return {
        key: value for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key not in columns or columns[key].nullable
    }
