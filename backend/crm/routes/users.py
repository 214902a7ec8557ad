from __future__ import annotations
from flask import Blueprint, request, abort
from sqlalchemy import or_
from crm import get_db
from crm.models.activity import ActivityAction
from crm.models.user import User
from crm.decorators.auth import require_user, current_user_id
from crm.schemas.user import UserUpdate, BulkDeleteRequest
from crm.services.activity import AuditOptions, ActivityLogStore, with_activity_logging
from crm.services.repository import AuditedRepository
from crm.utils.listing import list_response, single_response
from crm.utils.sorting import apply_multi_sort
from crm.utils.validation import parse_payload, validate_status

users_bp = Blueprint('users', __name__)


def _repo():
    return AuditedRepository(User, 'User', user_json, get_db())


@users_bp.get('')
@require_user
def list_users():
    q = get_db().query(User)
    term = (request.args.get('q') or '').strip()
    if term:
        q = q.filter(or_(User.name.ilike(f'%{term}%'), User.email.ilike(f'%{term}%')))
    status = request.args.get('status')
    if status:
        q = q.filter(User.status == validate_status(status, User.ALL_STATUSES))
    else:
        q = q.filter(User.status != User.STATUS_DELETED)
    allowed = {'name': User.name, 'email': User.email, 'created_at': User.created_at}
    q = apply_multi_sort(q, request.args.get('sort'), allowed, User.id, default=User.created_at.desc())
    return list_response(q, user_json, User.updated_at)


@users_bp.get('/<user_id>')
@require_user
def get_user(user_id: str):
    u = _repo().get_or_404(user_id)
    return single_response(user_json(u), u.updated_at)


@users_bp.patch('/<user_id>')
@require_user
def update_user(user_id: str):
    changes = parse_payload(UserUpdate, request.get_json(silent=True)).changes()
    u = _repo().update(user_id, changes, current_user_id())
    return user_json(u)


@users_bp.delete('')
@require_user
def delete_users():
    """Soft delete: affected users get status Deleted and can no longer sign in."""
    session = get_db()
    ids = sorted(set(parse_payload(BulkDeleteRequest, request.get_json(silent=True)).ids))
    acting = current_user_id()
    if acting in ids:
        abort(400, description='cannot delete yourself')

    def statuses():
        rows = session.query(User.id, User.status).filter(User.id.in_(ids)).all()
        return {uid: st for uid, st in rows}

    def operation():
        users = session.query(User).filter(User.id.in_(ids), User.status != User.STATUS_DELETED).all()
        for u in users:
            u.status = User.STATUS_DELETED
        session.commit()
        return len(users)

    count = with_activity_logging(operation, AuditOptions(
        entity_type='User',
        entity_id=','.join(ids),
        action=ActivityAction.DELETE,
        user_id=acting,
        get_previous_data=statuses,
        get_current_data=lambda _count: statuses(),
        metadata={'ids': ids, 'soft_delete': True},
    ), ActivityLogStore(lambda: session))
    return {'success': True, 'count': count}


def user_json(u: User):
    return {
        'id': u.id,
        'name': u.name,
        'email': u.email,
        'status': u.status,
        'last_login': u.last_login.isoformat() if u.last_login else None,
        'created_at': u.created_at.isoformat() if u.created_at else None,
        'updated_at': u.updated_at.isoformat() if u.updated_at else None,
    }
