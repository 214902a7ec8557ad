from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON, DateTime, ForeignKey
from datetime import datetime
from typing import Optional, List, Dict, Any

from .user import Base, new_id, utcnow


class Todo(Base):
    __tablename__ = 'todos'
    STATUS_TODO = 'Todo'
    STATUS_IN_PROGRESS = 'InProgress'
    STATUS_ON_HOLD = 'OnHold'
    STATUS_DONE = 'Done'
    ALL_STATUSES = (STATUS_TODO, STATUS_IN_PROGRESS, STATUS_ON_HOLD, STATUS_DONE)
    ALL_PRIORITIES = ('Low', 'Medium', 'High', 'Urgent')

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    task_name: Mapped[str] = mapped_column(String(255), nullable=False)
    linked_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    assigned_id: Mapped[Optional[str]] = mapped_column(ForeignKey('users.id'), index=True)
    owner_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_TODO, index=True)
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default='High')
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    files: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

__all__ = ["Todo"]
