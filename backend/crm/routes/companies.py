from __future__ import annotations
from flask import Blueprint, request
from crm import get_db
from crm.models.company import Company
from crm.models.user import User
from crm.decorators.auth import require_user, current_user_id
from crm.schemas.company import CompanyCreate, CompanyUpdate
from crm.services.repository import AuditedRepository
from crm.utils.filters import apply_filters, equals, one_of
from crm.utils.listing import list_response, single_response
from crm.utils.sorting import apply_multi_sort
from crm.utils.validation import parse_payload, ensure_references

companies_bp = Blueprint('companies', __name__)


def _repo():
    return AuditedRepository(Company, 'Company', _company_json, get_db())


@companies_bp.get('')
@require_user
def list_companies():
    q = get_db().query(Company)
    filter_specs = {
        'owner_id': {'op': equals(Company.owner_id)},
        'status': {'op': equals(Company.status), 'validate': one_of(Company.ALL_STATUSES)},
        'industry': {'op': equals(Company.industry)},
        'name': {'op': lambda qu, v: qu.filter(Company.full_name.ilike(f'%{v}%'))},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {
        'full_name': Company.full_name,
        'industry': Company.industry,
        'status': Company.status,
        'created_at': Company.created_at,
        'updated_at': Company.updated_at,
    }
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Company.id, default=Company.created_at.desc())
    return list_response(q, _company_json, Company.updated_at)


@companies_bp.post('')
@require_user
def create_company():
    session = get_db()
    data = parse_payload(CompanyCreate, request.get_json(silent=True))
    user_id = current_user_id()
    fields = data.model_dump()
    fields['owner_id'] = fields.get('owner_id') or user_id
    fields['user_id'] = user_id
    ensure_references(session, {'owner_id': (User, fields['owner_id'])})
    c = _repo().create(fields, user_id)
    return _company_json(c), 201


@companies_bp.get('/<company_id>')
@require_user
def get_company(company_id: str):
    c = _repo().get_or_404(company_id)
    return single_response(_company_json(c), c.updated_at)


@companies_bp.patch('/<company_id>')
@require_user
def update_company(company_id: str):
    session = get_db()
    changes = parse_payload(CompanyUpdate, request.get_json(silent=True)).changes()
    ensure_references(session, {'owner_id': (User, changes.get('owner_id'))})
    c = _repo().update(company_id, changes, current_user_id())
    return _company_json(c)


@companies_bp.delete('/<company_id>')
@require_user
def delete_company(company_id: str):
    _repo().delete(company_id, current_user_id())
    return {'success': True}


def _company_json(c: Company):
    return {
        'id': c.id,
        'full_name': c.full_name,
        'industry': c.industry,
        'email': c.email,
        'phone': c.phone,
        'website': c.website,
        'status': c.status,
        'tags': list(c.tags or []),
        'assignees': list(c.assignees or []),
        'notes': c.notes,
        'files': c.files,
        'owner_id': c.owner_id,
        'user_id': c.user_id,
        'created_at': c.created_at.isoformat() if c.created_at else None,
        'updated_at': c.updated_at.isoformat() if c.updated_at else None,
    }
