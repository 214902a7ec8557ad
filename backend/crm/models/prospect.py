from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON, DateTime, ForeignKey
from datetime import datetime
from typing import Optional, List

from .user import Base, new_id, utcnow


class Prospect(Base):
    __tablename__ = 'prospects'
    STATUS_NEW = 'New'
    STATUS_COLD = 'Cold'
    STATUS_WARM_LEAD = 'WarmLead'
    STATUS_QUALIFIED = 'Qualified'
    STATUS_CONVERTED = 'Converted'
    STATUS_NOT_INTERESTED = 'NotInterested'
    ALL_STATUSES = (
        STATUS_NEW,
        STATUS_COLD,
        STATUS_WARM_LEAD,
        STATUS_QUALIFIED,
        STATUS_CONVERTED,
        STATUS_NOT_INTERESTED
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    company_id: Mapped[Optional[str]] = mapped_column(ForeignKey('companies.id', ondelete='SET NULL'), index=True)
    email: Mapped[Optional[str]] = mapped_column(String(200))
    phone: Mapped[Optional[str]] = mapped_column(String(64))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_NEW, index=True)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    owner_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

__all__ = ["Prospect"]
