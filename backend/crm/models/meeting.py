from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON, DateTime, Integer, Boolean, ForeignKey
from datetime import datetime
from typing import Optional, List, Dict, Any

from .user import Base, new_id, utcnow


class Meeting(Base):
    __tablename__ = 'meetings'
    STATUS_SCHEDULED = 'Scheduled'
    STATUS_CONFIRMED = 'Confirmed'
    STATUS_CANCELLED = 'Cancelled'
    ALL_STATUSES = (STATUS_SCHEDULED, STATUS_CONFIRMED, STATUS_CANCELLED)
    # Recurrence
    ALL_FREQUENCIES = ('Daily', 'Weekly', 'Monthly', 'Yearly')
    ALL_ENDS = ('Never', 'After', 'OnDate')

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True)
    start_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    repeat_meeting: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    frequency: Mapped[str] = mapped_column(String(16), nullable=False, default='Daily')
    repeat_on: Mapped[Optional[str]] = mapped_column(String(64))
    repeat_every: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ends: Mapped[str] = mapped_column(String(16), nullable=False, default='Never')
    location: Mapped[Optional[str]] = mapped_column(String(255))
    link: Mapped[Optional[str]] = mapped_column(String(512))
    linked_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    assigned_id: Mapped[Optional[str]] = mapped_column(ForeignKey('users.id'), index=True)
    owner_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    participants: Mapped[List[str]] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_SCHEDULED, index=True)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    files: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

__all__ = ["Meeting"]
