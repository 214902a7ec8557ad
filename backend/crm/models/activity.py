from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, JSON, DateTime, ForeignKey, func
from datetime import datetime
from typing import Optional, List, Dict, Any
import enum

from .user import Base  # reuse same metadata


class ActivityAction(str, enum.Enum):
    CREATE = 'Create'
    UPDATE = 'Update'
    DELETE = 'Delete'


class ActivityLog(Base):
    """Append-only audit record of one state-changing event."""
    __tablename__ = 'activity_logs'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    changed_fields: Mapped[List[str]] = mapped_column(JSON, default=list)
    previous_values: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    new_values: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    # 'metadata' is reserved on declarative classes
    meta: Mapped[Optional[Dict[str, Any]]] = mapped_column('metadata', JSON)
    performed_by_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), index=True)

    performed_by = relationship('User', lazy='joined')

__all__ = ["ActivityAction", "ActivityLog"]
