from __future__ import annotations
from flask import Blueprint, request
from crm import get_db
from crm.models.deal import Deal
from crm.models.company import Company
from crm.models.customer import Customer
from crm.models.user import User
from crm.decorators.auth import require_user, current_user_id
from crm.schemas.deal import DealCreate, DealUpdate
from crm.services.repository import AuditedRepository
from crm.services.stats import deal_stats as compute_deal_stats, normalize_range
from crm.utils.filters import apply_filters, equals, one_of
from crm.utils.listing import list_response, single_response
from crm.utils.sorting import apply_multi_sort
from crm.utils.validation import parse_payload, ensure_references

deals_bp = Blueprint('deals', __name__)


def _repo():
    return AuditedRepository(Deal, 'Deal', _deal_json, get_db())


def _check_refs(session, fields: dict):
    ensure_references(session, {
        'company_id': (Company, fields.get('company_id')),
        'contact_id': (Customer, fields.get('contact_id')),
        'owner_id': (User, fields.get('owner_id')),
    })


@deals_bp.get('')
@require_user
def list_deals():
    q = get_db().query(Deal)
    filter_specs = {
        'owner_id': {'op': equals(Deal.owner_id)},
        'company_id': {'op': equals(Deal.company_id)},
        'contact_id': {'op': equals(Deal.contact_id)},
        'stage': {'op': equals(Deal.stage), 'validate': one_of(Deal.ALL_STAGES)},
        'deal_name': {'op': lambda qu, v: qu.filter(Deal.deal_name.ilike(f'%{v}%'))},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {
        'deal_name': Deal.deal_name,
        'stage': Deal.stage,
        'amount': Deal.amount,
        'close_date': Deal.close_date,
        'created_at': Deal.created_at,
        'updated_at': Deal.updated_at,
    }
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Deal.id, default=Deal.created_at.desc())
    return list_response(q, _deal_json, Deal.updated_at)


@deals_bp.get('/stats')
@require_user
def deal_stats():
    range_key = normalize_range(request.args.get('range'))
    filters = {
        'owner_id': request.args.get('owner_id') or None,
        'company_id': request.args.get('company_id') or None,
        'contact_id': request.args.get('contact_id') or None,
    }
    data = compute_deal_stats(get_db(), range_key, **filters)
    return {'range': range_key, 'filters': filters, 'data': data}


@deals_bp.post('')
@require_user
def create_deal():
    session = get_db()
    data = parse_payload(DealCreate, request.get_json(silent=True))
    user_id = current_user_id()
    fields = data.model_dump()
    fields['owner_id'] = fields.get('owner_id') or user_id
    _check_refs(session, fields)
    d = _repo().create(fields, user_id)
    return _deal_json(d), 201


@deals_bp.get('/<deal_id>')
@require_user
def get_deal(deal_id: str):
    d = _repo().get_or_404(deal_id)
    return single_response(_deal_json(d), d.updated_at)


@deals_bp.patch('/<deal_id>')
@require_user
def update_deal(deal_id: str):
    session = get_db()
    changes = parse_payload(DealUpdate, request.get_json(silent=True)).changes()
    _check_refs(session, changes)
    d = _repo().update(deal_id, changes, current_user_id())
    return _deal_json(d)


@deals_bp.delete('/<deal_id>')
@require_user
def delete_deal(deal_id: str):
    _repo().delete(deal_id, current_user_id())
    return {'success': True}


def _deal_json(d: Deal):
    return {
        'id': d.id,
        'deal_name': d.deal_name,
        'company_id': d.company_id,
        'contact_id': d.contact_id,
        'stage': d.stage,
        'amount': d.amount,
        'currency': d.currency,
        'owner_id': d.owner_id,
        'close_date': d.close_date.isoformat() if d.close_date else None,
        'tags': list(d.tags or []),
        'notes': d.notes,
        'files': d.files,
        'created_at': d.created_at.isoformat() if d.created_at else None,
        'updated_at': d.updated_at.isoformat() if d.updated_at else None,
    }
