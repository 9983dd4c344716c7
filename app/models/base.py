"""Base Models and Mixins"""

import uuid
from sqlalchemy import Column, DateTime
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base
from app.utils.time import get_utc_now


class TimestampMixin:
    """
    Mixin for created/updated timestamps.

    Provides:
    - created_at timestamp
    - updated_at timestamp
    """
    created_at = Column(DateTime, default=get_utc_now, nullable=False)
    updated_at = Column(DateTime, default=get_utc_now, onupdate=get_utc_now, nullable=False)


class BaseModel(Base, TimestampMixin):
    """
    Base model class for records owned by this service.

    Provides:
    - UUID primary key
    - created_at / updated_at timestamps
    """
    __abstract__ = True

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
