from flask import Blueprint, request, abort
from crm import get_db
from crm.config.pagination import normalize_pagination, ACTIVITY_MAX_LIMIT
from crm.decorators.auth import require_user
from crm.models.activity import ActivityLog, ActivityAction
from crm.utils.filters import apply_filters, equals, one_of

activity_bp = Blueprint('activity', __name__)


@activity_bp.get('')
@require_user
def list_activity():
    """Activity feed, newest first. ``skip``/``limit`` page through it; ``limit`` is capped at 100."""
    session = get_db()
    q = session.query(ActivityLog)
    filter_specs = {
        'entity_type': {'op': equals(ActivityLog.entity_type)},
        'entity_id': {'op': equals(ActivityLog.entity_id)},
        'performed_by_id': {'op': equals(ActivityLog.performed_by_id)},
        'action': {'op': equals(ActivityLog.action), 'validate': one_of([a.value for a in ActivityAction])},
    }
    q = apply_filters(q, filter_specs, request.args)
    try:
        limit, skip = normalize_pagination(request.args.get('limit'), request.args.get('skip'),
                                           max_limit=ACTIVITY_MAX_LIMIT)
    except ValueError as e:
        abort(400, description=str(e))
    total = q.order_by(None).count()
    rows = q.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).offset(skip).limit(limit).all()
    return {
        'data': [activity_json(r) for r in rows],
        'total': total,
        'has_more': skip + len(rows) < total,
    }


def activity_json(r: ActivityLog):
    performer = r.performed_by
    return {
        'id': r.id,
        'entity_type': r.entity_type,
        'entity_id': r.entity_id,
        'action': r.action,
        'changed_fields': r.changed_fields or [],
        'previous_values': r.previous_values,
        'new_values': r.new_values,
        'metadata': r.meta,
        'performed_by': {'id': performer.id, 'name': performer.name, 'email': performer.email} if performer else None,
        'created_at': r.created_at.isoformat() if r.created_at else None,
    }
