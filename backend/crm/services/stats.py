from __future__ import annotations
"""Deal pipeline statistics over a named date range, compared with the preceding period."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple
from sqlalchemy import func, and_, not_, true
from crm.models.deal import Deal
from crm.models.user import utcnow

RANGE_KEYS = (
    'this_week',
    'this_month',
    'this_year',
    'last_7_days',
    'last_28_days',
    'last_365_days',
    'all',
)
DEFAULT_RANGE = 'this_month'
_ROLLING_DAYS = {'last_7_days': 7, 'last_28_days': 28, 'last_365_days': 365}


@dataclass(frozen=True)
class Window:
    """Half-open interval [gte, lt); both None means unbounded."""
    gte: Optional[datetime] = None
    lt: Optional[datetime] = None

    @property
    def bounded(self) -> bool:
        return self.gte is not None and self.lt is not None


def normalize_range(raw: Optional[str]) -> str:
    key = (raw or DEFAULT_RANGE).lower()
    return key if key in RANGE_KEYS else DEFAULT_RANGE


def date_windows(range_key: str, now: Optional[datetime] = None) -> Tuple[Window, Window]:
    """Return (current, previous) windows for ``range_key``.

    Calendar ranges start at midnight (weeks on Monday); rolling ranges end at ``now``.
    The previous window has the same length and ends where the current one starts.
    """
    now = now or utcnow()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if range_key == 'all':
        return Window(), Window()
    if range_key == 'this_week':
        gte = midnight - timedelta(days=now.weekday())
        lt = gte + timedelta(days=7)
    elif range_key == 'this_month':
        gte = midnight.replace(day=1)
        lt = gte.replace(year=gte.year + 1, month=1) if gte.month == 12 else gte.replace(month=gte.month + 1)
    elif range_key == 'this_year':
        gte = midnight.replace(month=1, day=1)
        lt = gte.replace(year=gte.year + 1)
    elif range_key in _ROLLING_DAYS:
        lt = now
        gte = now - timedelta(days=_ROLLING_DAYS[range_key])
    else:
        raise ValueError(f'unknown range {range_key}')
    current = Window(gte, lt)
    return current, Window(gte - (lt - gte), gte)


def pct_change(prev: float, curr: float, range_key: str) -> float:
    if range_key == 'all':
        return 0
    if prev == 0 and curr == 0:
        return 0
    if prev == 0 and curr > 0:
        return 100
    if prev > 0 and curr == 0:
        return -100
    return round((curr - prev) / prev * 100, 2)


def _period_metrics(session, window: Window, filters) -> dict:
    conds = list(filters)
    if window.bounded:
        conds += [Deal.created_at >= window.gte, Deal.created_at < window.lt]
    where = and_(true(), *conds)

    def count(*extra):
        q = session.query(func.count(Deal.id)).filter(where)
        if extra:
            q = q.filter(*extra)
        return int(q.scalar() or 0)

    total = count()
    won = count(Deal.stage == Deal.STAGE_WON)
    revenue = session.query(func.coalesce(func.sum(Deal.amount), 0)).filter(where, Deal.stage != Deal.STAGE_LOST).scalar()
    return {
        'total': total,
        'new': count(Deal.stage == Deal.STAGE_NEW),
        'active': count(not_(Deal.stage.in_(Deal.CLOSED_STAGES))),
        'won': won,
        'contacted': count(Deal.stage == Deal.STAGE_CONTACTED),
        'proposal': count(Deal.stage == Deal.STAGE_PROPOSAL),
        'negotiation': count(Deal.stage == Deal.STAGE_NEGOTIATION),
        'revenue': float(revenue or 0),
        'conversion': (won / total * 100) if won else 0,
    }


def deal_stats(session, range_key: str, owner_id: Optional[str] = None, company_id: Optional[str] = None,
               contact_id: Optional[str] = None, now: Optional[datetime] = None) -> dict:
    """Aggregate deal counts and revenue for the current window plus period-over-period changes."""
    filters = []
    if owner_id:
        filters.append(Deal.owner_id == owner_id)
    if company_id:
        filters.append(Deal.company_id == company_id)
    if contact_id:
        filters.append(Deal.contact_id == contact_id)
    current_w, previous_w = date_windows(range_key, now)
    cur = _period_metrics(session, current_w, filters)
    prev = _period_metrics(session, previous_w, filters)
    return {
        'total_deals': cur['total'],
        'new_deals': cur['new'],
        'active_deals': cur['active'],
        'won_deals': cur['won'],
        'contacted_deals': cur['contacted'],
        'proposal_deals': cur['proposal'],
        'negotiation_deals': cur['negotiation'],
        'conversion_rate': cur['conversion'],
        'expected_revenue': cur['revenue'],
        'changes': {
            'new_deals_change_percent': pct_change(prev['new'], cur['new'], range_key),
            'active_deals_change_percent': pct_change(prev['active'], cur['active'], range_key),
            'expected_revenue_change_percent': pct_change(prev['revenue'], cur['revenue'], range_key),
            'conversion_rate_change_percent': pct_change(prev['conversion'], cur['conversion'], range_key),
        },
    }

__all__ = ['RANGE_KEYS', 'Window', 'normalize_range', 'date_windows', 'pct_change', 'deal_stats']
