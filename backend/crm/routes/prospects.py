from __future__ import annotations
from flask import Blueprint, request
from crm import get_db
from crm.models.company import Company
from crm.models.prospect import Prospect
from crm.models.user import User
from crm.decorators.auth import require_user, current_user_id
from crm.schemas.prospect import ProspectCreate, ProspectUpdate
from crm.services.repository import AuditedRepository
from crm.utils.filters import apply_filters, equals, one_of
from crm.utils.listing import list_response, single_response
from crm.utils.sorting import apply_multi_sort
from crm.utils.validation import parse_payload, ensure_references

prospects_bp = Blueprint('prospects', __name__)


def _repo():
    return AuditedRepository(Prospect, 'Prospect', _prospect_json, get_db())


def _check_refs(session, fields: dict):
    ensure_references(session, {
        'company_id': (Company, fields.get('company_id')),
        'owner_id': (User, fields.get('owner_id')),
    })


@prospects_bp.get('')
@require_user
def list_prospects():
    q = get_db().query(Prospect)
    filter_specs = {
        'owner_id': {'op': equals(Prospect.owner_id)},
        'company_id': {'op': equals(Prospect.company_id)},
        'status': {'op': equals(Prospect.status), 'validate': one_of(Prospect.ALL_STATUSES)},
        'name': {'op': lambda qu, v: qu.filter(Prospect.full_name.ilike(f'%{v}%'))},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {
        'full_name': Prospect.full_name,
        'status': Prospect.status,
        'created_at': Prospect.created_at,
        'updated_at': Prospect.updated_at,
    }
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Prospect.id, default=Prospect.created_at.desc())
    return list_response(q, _prospect_json, Prospect.updated_at)


@prospects_bp.post('')
@require_user
def create_prospect():
    session = get_db()
    data = parse_payload(ProspectCreate, request.get_json(silent=True))
    user_id = current_user_id()
    fields = data.model_dump()
    fields['owner_id'] = fields.get('owner_id') or user_id
    fields['user_id'] = user_id
    _check_refs(session, fields)
    p = _repo().create(fields, user_id)
    return _prospect_json(p), 201


@prospects_bp.get('/<prospect_id>')
@require_user
def get_prospect(prospect_id: str):
    p = _repo().get_or_404(prospect_id)
    return single_response(_prospect_json(p), p.updated_at)


@prospects_bp.patch('/<prospect_id>')
@require_user
def update_prospect(prospect_id: str):
    session = get_db()
    changes = parse_payload(ProspectUpdate, request.get_json(silent=True)).changes()
    _check_refs(session, changes)
    p = _repo().update(prospect_id, changes, current_user_id())
    return _prospect_json(p)


@prospects_bp.delete('/<prospect_id>')
@require_user
def delete_prospect(prospect_id: str):
    _repo().delete(prospect_id, current_user_id())
    return {'success': True}


def _prospect_json(p: Prospect):
    return {
        'id': p.id,
        'full_name': p.full_name,
        'company_id': p.company_id,
        'email': p.email,
        'phone': p.phone,
        'status': p.status,
        'tags': list(p.tags or []),
        'notes': p.notes,
        'owner_id': p.owner_id,
        'user_id': p.user_id,
        'created_at': p.created_at.isoformat() if p.created_at else None,
        'updated_at': p.updated_at.isoformat() if p.updated_at else None,
    }
