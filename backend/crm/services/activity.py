from __future__ import annotations
"""Activity logging: the append-only store and the audited mutation executor.

Route handlers wrap every create/update/delete in ``with_activity_logging``:

    deal = with_activity_logging(
        lambda: _update_deal(deal_id, data),
        AuditOptions('Deal', deal_id, ActivityAction.UPDATE, user_id,
                     get_previous_data=lambda: _deal_snapshot(deal_id),
                     get_current_data=_deal_json,
                     metadata={'fields': sorted(data)}),
    )

The executor loads the previous snapshot, runs the operation, extracts the current
snapshot, diffs the two and appends exactly one ``ActivityLog`` row, whether the operation
succeeds or fails. Audit writes are best-effort: a failing store never changes what the
caller observes.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from crm.models.activity import ActivityAction, ActivityLog
from crm.utils.diff import changed_fields

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class ActivityLogEntry:
    entity_type: str
    entity_id: str
    action: ActivityAction
    performed_by_id: str
    changed_fields: list = field(default_factory=list)
    previous_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class ActivityLogStore:
    """Persists ``ActivityLogEntry`` records through a SQLAlchemy session factory."""

    def __init__(self, session_factory: Optional[Callable[[], Any]] = None):
        if session_factory is None:
            from crm import get_db
            session_factory = get_db
        self._session_factory = session_factory

    def append(self, entry: ActivityLogEntry, *, discard_pending: bool = False) -> Optional[ActivityLog]:
        """Write one entry and commit. Never raises; returns None when the write failed.

        discard_pending: roll back whatever the session holds first (used after a failed
        mutation so its partial state is not committed together with the audit row).
        """
        if not entry.entity_id or not entry.performed_by_id:
            logger.error(
                'Refusing activity entry without entity_id/performed_by_id: %s %s',
                entry.entity_type, entry.action.value,
            )
            return None
        session = None
        try:
            session = self._session_factory()
            if discard_pending or not session.is_active:
                session.rollback()
            log = ActivityLog(
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                action=entry.action.value,
                changed_fields=list(entry.changed_fields),
                previous_values=entry.previous_values,
                new_values=entry.new_values,
                meta=entry.metadata,
                performed_by_id=entry.performed_by_id,
            )
            session.add(log)
            session.commit()
            return log
        except Exception:
            logger.exception('Failed to log activity for %s %s', entry.entity_type, entry.entity_id)
            if session is not None:
                try:
                    session.rollback()
                except Exception:
                    logger.exception('Rollback after failed activity write also failed')
            return None


@dataclass
class AuditOptions:
    """How one mutation is audited.

    get_previous_data: returns the entity snapshot before the operation. Any error it
        raises propagates and the operation is not attempted. Omit for creates.
    get_current_data: receives the operation result and returns the snapshot after it.
        Omit when no after-state is wanted (deletes).
    metadata: free-form attributes stored with the entry.
    """
    entity_type: str
    entity_id: str
    action: ActivityAction
    user_id: str
    get_previous_data: Optional[Callable[[], Optional[Dict[str, Any]]]] = None
    get_current_data: Optional[Callable[[Any], Optional[Dict[str, Any]]]] = None
    metadata: Optional[Dict[str, Any]] = None


def _result_id(result: Any) -> str:
    if isinstance(result, dict):
        value = result.get('id')
    else:
        value = getattr(result, 'id', None)
    return str(value) if value is not None else ''


def _error_message(exc: BaseException) -> str:
    description = getattr(exc, 'description', None)  # werkzeug HTTPException
    if isinstance(description, str) and description:
        return description
    return str(exc) or type(exc).__name__


def _record(store, entry: ActivityLogEntry, **kwargs) -> None:
    # an audit write never changes what the caller observes
    try:
        store.append(entry, **kwargs)
    except Exception:
        logger.exception('Activity store raised for %s %s', entry.entity_type, entry.entity_id)


def with_activity_logging(
    operation: Callable[[], T],
    options: AuditOptions,
    store: Optional[ActivityLogStore] = None,
) -> T:
    """Run ``operation`` and record its outcome in the activity log.

    Returns the operation result. If the operation raises, a failure entry is written
    (``new_values`` None, ``metadata['error']`` set, the intended action kept) and the
    original exception is re-raised unchanged.
    """
    store = store or ActivityLogStore()

    previous = options.get_previous_data() if options.get_previous_data else None

    try:
        result = operation()
    except Exception as exc:
        meta = dict(options.metadata or {})
        meta['error'] = _error_message(exc)
        _record(store, ActivityLogEntry(
            entity_type=options.entity_type,
            entity_id=options.entity_id,
            action=options.action,
            performed_by_id=options.user_id,
            previous_values=previous,
            new_values=None,
            metadata=meta,
        ), discard_pending=True)
        raise

    meta = options.metadata
    current = None
    if options.get_current_data:
        try:
            current = options.get_current_data(result)
        except Exception as exc:
            # the mutation is committed; report the extractor and log the success anyway
            logger.warning(
                'Could not read %s state after %s: %s',
                options.entity_type, options.action.value, exc, exc_info=True,
            )
            meta = dict(meta or {})
            meta['current_data_error'] = _error_message(exc)

    _record(store, ActivityLogEntry(
        entity_type=options.entity_type,
        entity_id=options.entity_id or _result_id(result),
        action=options.action,
        performed_by_id=options.user_id,
        changed_fields=changed_fields(previous, current),
        previous_values=previous,
        new_values=current,
        metadata=meta,
    ))
    return result

__all__ = ['ActivityLogEntry', 'ActivityLogStore', 'AuditOptions', 'with_activity_logging']
