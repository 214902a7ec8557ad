from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON, DateTime, ForeignKey
from datetime import datetime
from typing import Optional, List, Dict, Any

from .user import Base, new_id, utcnow


class Customer(Base):
    __tablename__ = 'customers'
    STATUS_ACTIVE = 'Active'
    STATUS_FOLLOW_UP = 'FollowUp'
    STATUS_INACTIVE = 'Inactive'
    ALL_STATUSES = (STATUS_ACTIVE, STATUS_FOLLOW_UP, STATUS_INACTIVE)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    company_id: Mapped[Optional[str]] = mapped_column(ForeignKey('companies.id', ondelete='SET NULL'), index=True)
    email: Mapped[Optional[str]] = mapped_column(String(200))
    phone: Mapped[Optional[str]] = mapped_column(String(64))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_ACTIVE, index=True)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    files: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON)
    owner_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

__all__ = ["Customer"]
