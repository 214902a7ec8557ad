from __future__ import annotations
from flask import Blueprint, request
from crm import get_db
from crm.models.company import Company
from crm.models.customer import Customer
from crm.models.user import User
from crm.decorators.auth import require_user, current_user_id
from crm.schemas.customer import CustomerCreate, CustomerUpdate
from crm.services.repository import AuditedRepository
from crm.utils.filters import apply_filters, equals, one_of
from crm.utils.listing import list_response, single_response
from crm.utils.sorting import apply_multi_sort
from crm.utils.validation import parse_payload, ensure_references

customers_bp = Blueprint('customers', __name__)


def _repo():
    return AuditedRepository(Customer, 'Customer', _customer_json, get_db())


def _check_refs(session, fields: dict):
    ensure_references(session, {
        'company_id': (Company, fields.get('company_id')),
        'owner_id': (User, fields.get('owner_id')),
    })


@customers_bp.get('')
@require_user
def list_customers():
    q = get_db().query(Customer)
    filter_specs = {
        'owner_id': {'op': equals(Customer.owner_id)},
        'company_id': {'op': equals(Customer.company_id)},
        'status': {'op': equals(Customer.status), 'validate': one_of(Customer.ALL_STATUSES)},
        'name': {'op': lambda qu, v: qu.filter(Customer.full_name.ilike(f'%{v}%'))},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {
        'full_name': Customer.full_name,
        'status': Customer.status,
        'created_at': Customer.created_at,
        'updated_at': Customer.updated_at,
    }
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Customer.id, default=Customer.created_at.desc())
    return list_response(q, _customer_json, Customer.updated_at)


@customers_bp.post('')
@require_user
def create_customer():
    session = get_db()
    data = parse_payload(CustomerCreate, request.get_json(silent=True))
    user_id = current_user_id()
    fields = data.model_dump()
    fields['owner_id'] = fields.get('owner_id') or user_id
    fields['user_id'] = user_id
    _check_refs(session, fields)
    c = _repo().create(fields, user_id)
    return _customer_json(c), 201


@customers_bp.get('/<customer_id>')
@require_user
def get_customer(customer_id: str):
    c = _repo().get_or_404(customer_id)
    return single_response(_customer_json(c), c.updated_at)


@customers_bp.patch('/<customer_id>')
@require_user
def update_customer(customer_id: str):
    session = get_db()
    changes = parse_payload(CustomerUpdate, request.get_json(silent=True)).changes()
    _check_refs(session, changes)
    c = _repo().update(customer_id, changes, current_user_id())
    return _customer_json(c)


@customers_bp.delete('/<customer_id>')
@require_user
def delete_customer(customer_id: str):
    _repo().delete(customer_id, current_user_id())
    return {'success': True}


def _customer_json(c: Customer):
    return {
        'id': c.id,
        'full_name': c.full_name,
        'company_id': c.company_id,
        'email': c.email,
        'phone': c.phone,
        'status': c.status,
        'tags': list(c.tags or []),
        'notes': c.notes,
        'files': c.files,
        'owner_id': c.owner_id,
        'user_id': c.user_id,
        'created_at': c.created_at.isoformat() if c.created_at else None,
        'updated_at': c.updated_at.isoformat() if c.updated_at else None,
    }
