import pytest
from crm import get_db
from crm.models.activity import ActivityLog
from crm.models.deal import Deal
from crm.routes.deals import _deal_json
from crm.services.repository import AuditedRepository
from tests.test_utils_seed import ensure_user, unique_email, activity_for


def _repo():
    return AuditedRepository(Deal, 'Deal', _deal_json, get_db())


def test_create_logs_generated_id(app_context):
    user = ensure_user(unique_email('repo_create'))
    deal = _repo().create({'deal_name': 'Repo Deal', 'amount': 10, 'owner_id': user.id}, user.id)
    logs = activity_for('Deal', deal.id)
    assert len(logs) == 1
    assert logs[0].action == 'Create'
    assert logs[0].new_values['id'] == deal.id


def test_create_keeps_caller_id(app_context):
    user = ensure_user(unique_email('repo_given_id'))
    deal = _repo().create({'id': 'deal-fixed-id', 'deal_name': 'Fixed', 'amount': 1, 'owner_id': user.id}, user.id)
    assert deal.id == 'deal-fixed-id'
    assert len(activity_for('Deal', 'deal-fixed-id')) == 1


def test_failed_create_is_logged(app_context):
    user = ensure_user(unique_email('repo_failed'))
    with pytest.raises(TypeError):
        _repo().create({'deal_name': 'Broken', 'owner_id': user.id, 'bogus': 1}, user.id)
    session = get_db()
    logs = session.query(ActivityLog).filter_by(performed_by_id=user.id, entity_type='Deal').all()
    assert len(logs) == 1
    entry = logs[0]
    assert entry.action == 'Create'
    assert entry.entity_id
    assert entry.new_values is None
    assert 'bogus' in entry.meta['error']
    assert session.get(Deal, entry.entity_id) is None
