from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON, DateTime, Float, ForeignKey
from datetime import datetime
from typing import Optional, List, Dict, Any

from .user import Base, new_id, utcnow


class Deal(Base):
    __tablename__ = 'deals'
    # Pipeline stages
    STAGE_NEW = 'New'
    STAGE_CONTACTED = 'Contacted'
    STAGE_PROPOSAL = 'Proposal'
    STAGE_NEGOTIATION = 'Negotiation'
    STAGE_WON = 'Won'
    STAGE_LOST = 'Lost'
    ALL_STAGES = (
        STAGE_NEW,
        STAGE_CONTACTED,
        STAGE_PROPOSAL,
        STAGE_NEGOTIATION,
        STAGE_WON,
        STAGE_LOST
    )
    CLOSED_STAGES = (STAGE_WON, STAGE_LOST)
    ALL_CURRENCIES = ('USD', 'EUR', 'GBP')

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    deal_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    company_id: Mapped[Optional[str]] = mapped_column(ForeignKey('companies.id', ondelete='SET NULL'), index=True)
    contact_id: Mapped[Optional[str]] = mapped_column(ForeignKey('customers.id', ondelete='SET NULL'), index=True)
    stage: Mapped[str] = mapped_column(String(16), nullable=False, default=STAGE_NEW, index=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default='USD')
    owner_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    close_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    files: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

__all__ = ["Deal"]
