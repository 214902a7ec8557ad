from __future__ import annotations
from flask import Blueprint, request
from crm import get_db
from crm.models.meeting import Meeting
from crm.models.user import User
from crm.decorators.auth import require_user, current_user_id
from crm.schemas.meeting import MeetingCreate, MeetingUpdate
from crm.services.repository import AuditedRepository
from crm.utils.filters import apply_filters, equals, one_of
from crm.utils.listing import list_response, single_response
from crm.utils.sorting import apply_multi_sort
from crm.utils.validation import ValidationError, parse_payload, ensure_references

meetings_bp = Blueprint('meetings', __name__)


def _repo():
    return AuditedRepository(Meeting, 'Meeting', _meeting_json, get_db())


def _check_refs(session, fields: dict):
    ensure_references(session, {
        'linked_id': (User, fields.get('linked_id')),
        'assigned_id': (User, fields.get('assigned_id')),
    })


@meetings_bp.get('')
@require_user
def list_meetings():
    q = get_db().query(Meeting)
    filter_specs = {
        'owner_id': {'op': equals(Meeting.owner_id)},
        'linked_id': {'op': equals(Meeting.linked_id)},
        'assigned_id': {'op': equals(Meeting.assigned_id)},
        'status': {'op': equals(Meeting.status), 'validate': one_of(Meeting.ALL_STATUSES)},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {
        'title': Meeting.title,
        'status': Meeting.status,
        'start_date': Meeting.start_date,
        'start_time': Meeting.start_time,
        'created_at': Meeting.created_at,
        'updated_at': Meeting.updated_at,
    }
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Meeting.id, default=Meeting.created_at.desc())
    return list_response(q, _meeting_json, Meeting.updated_at)


@meetings_bp.post('')
@require_user
def create_meeting():
    session = get_db()
    data = parse_payload(MeetingCreate, request.get_json(silent=True))
    user_id = current_user_id()
    fields = data.model_dump()
    fields['linked_id'] = fields.get('linked_id') or user_id
    fields['assigned_id'] = fields.get('assigned_id') or user_id
    fields['owner_id'] = user_id
    _check_refs(session, fields)
    m = _repo().create(fields, user_id)
    return _meeting_json(m), 201


@meetings_bp.get('/<meeting_id>')
@require_user
def get_meeting(meeting_id: str):
    m = _repo().get_or_404(meeting_id)
    return single_response(_meeting_json(m), m.updated_at)


@meetings_bp.patch('/<meeting_id>')
@require_user
def update_meeting(meeting_id: str):
    session = get_db()
    repo = _repo()
    changes = parse_payload(MeetingUpdate, request.get_json(silent=True)).changes()
    _check_refs(session, changes)
    current = repo.get(meeting_id)
    if current is not None:
        start = changes.get('start_time', current.start_time)
        end = changes.get('end_time', current.end_time)
        if start and end and end < start:
            raise ValidationError(fields={'end_time': ['end_time must not be before start_time']})
    m = repo.update(meeting_id, changes, current_user_id())
    return _meeting_json(m)


@meetings_bp.delete('/<meeting_id>')
@require_user
def delete_meeting(meeting_id: str):
    _repo().delete(meeting_id, current_user_id())
    return {'success': True}


def _iso(value):
    return value.isoformat() if value else None


def _meeting_json(m: Meeting):
    return {
        'id': m.id,
        'title': m.title,
        'start_date': _iso(m.start_date),
        'start_time': _iso(m.start_time),
        'end_time': _iso(m.end_time),
        'repeat_meeting': m.repeat_meeting,
        'frequency': m.frequency,
        'repeat_on': m.repeat_on,
        'repeat_every': m.repeat_every,
        'ends': m.ends,
        'location': m.location,
        'link': m.link,
        'linked_id': m.linked_id,
        'assigned_id': m.assigned_id,
        'owner_id': m.owner_id,
        'participants': list(m.participants or []),
        'status': m.status,
        'tags': list(m.tags or []),
        'notes': m.notes,
        'files': m.files,
        'created_at': _iso(m.created_at),
        'updated_at': _iso(m.updated_at),
    }
