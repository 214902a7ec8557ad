from __future__ import annotations
from flask import Blueprint, request
from crm import get_db
from crm.models.todo import Todo
from crm.models.user import User
from crm.decorators.auth import require_user, current_user_id
from crm.schemas.todo import TodoCreate, TodoUpdate
from crm.services.repository import AuditedRepository
from crm.utils.filters import apply_filters, equals, one_of
from crm.utils.listing import list_response, single_response
from crm.utils.sorting import apply_multi_sort
from crm.utils.validation import parse_payload, ensure_references

todos_bp = Blueprint('todos', __name__)


def _repo():
    return AuditedRepository(Todo, 'Todo', _todo_json, get_db())


def _check_refs(session, fields: dict):
    ensure_references(session, {
        'linked_id': (User, fields.get('linked_id')),
        'assigned_id': (User, fields.get('assigned_id')),
    })


@todos_bp.get('')
@require_user
def list_todos():
    q = get_db().query(Todo)
    filter_specs = {
        'linked_id': {'op': equals(Todo.linked_id)},
        'assigned_id': {'op': equals(Todo.assigned_id)},
        'status': {'op': equals(Todo.status), 'validate': one_of(Todo.ALL_STATUSES)},
        'priority': {'op': equals(Todo.priority), 'validate': one_of(Todo.ALL_PRIORITIES)},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {
        'task_name': Todo.task_name,
        'status': Todo.status,
        'priority': Todo.priority,
        'due_date': Todo.due_date,
        'created_at': Todo.created_at,
        'updated_at': Todo.updated_at,
    }
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Todo.id, default=Todo.created_at.desc())
    return list_response(q, _todo_json, Todo.updated_at)


@todos_bp.post('')
@require_user
def create_todo():
    session = get_db()
    data = parse_payload(TodoCreate, request.get_json(silent=True))
    user_id = current_user_id()
    fields = data.model_dump()
    # tasks link to and are assigned to the creator unless stated otherwise
    fields['linked_id'] = fields.get('linked_id') or user_id
    fields['assigned_id'] = fields.get('assigned_id') or user_id
    fields['owner_id'] = user_id
    _check_refs(session, fields)
    t = _repo().create(fields, user_id)
    return _todo_json(t), 201


@todos_bp.get('/<todo_id>')
@require_user
def get_todo(todo_id: str):
    t = _repo().get_or_404(todo_id)
    return single_response(_todo_json(t), t.updated_at)


@todos_bp.patch('/<todo_id>')
@require_user
def update_todo(todo_id: str):
    session = get_db()
    changes = parse_payload(TodoUpdate, request.get_json(silent=True)).changes()
    _check_refs(session, changes)
    t = _repo().update(todo_id, changes, current_user_id())
    return _todo_json(t)


@todos_bp.delete('/<todo_id>')
@require_user
def delete_todo(todo_id: str):
    _repo().delete(todo_id, current_user_id())
    return {'success': True}


def _todo_json(t: Todo):
    return {
        'id': t.id,
        'task_name': t.task_name,
        'linked_id': t.linked_id,
        'assigned_id': t.assigned_id,
        'owner_id': t.owner_id,
        'status': t.status,
        'priority': t.priority,
        'due_date': t.due_date.isoformat() if t.due_date else None,
        'notes': t.notes,
        'files': t.files,
        'created_at': t.created_at.isoformat() if t.created_at else None,
        'updated_at': t.updated_at.isoformat() if t.updated_at else None,
    }
