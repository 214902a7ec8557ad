from flask import Flask
from tests.test_utils_seed import seed_user_with_headers, ensure_company, activity_for


def test_customer_create_logs_snapshot(app_context: Flask):
    client = app_context.test_client()
    user, headers = seed_user_with_headers('customer_user')
    company = ensure_company(user, 'Customer Co')
    resp = client.post('/customers', json={'full_name': 'Jane', 'company_id': company.id, 'phone': ''}, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    customer = resp.get_json()
    assert customer['phone'] is None
    logs = activity_for('Customer', customer['id'])
    assert len(logs) == 1
    entry = logs[0]
    assert entry.action == 'Create'
    assert entry.previous_values is None
    assert entry.new_values['full_name'] == 'Jane'
    assert entry.changed_fields == []


def test_customer_filters_by_company(app_context: Flask):
    client = app_context.test_client()
    user, headers = seed_user_with_headers('customer_filter')
    company = ensure_company(user, 'Filter Co')
    client.post('/customers', json={'full_name': 'Inside', 'company_id': company.id}, headers=headers)
    client.post('/customers', json={'full_name': 'Outside'}, headers=headers)
    resp = client.get(f'/customers?company_id={company.id}', headers=headers)
    assert [c['full_name'] for c in resp.get_json()['data']] == ['Inside']


def test_prospect_status_flow(app_context: Flask):
    client = app_context.test_client()
    _, headers = seed_user_with_headers('prospect_user')
    resp = client.post('/prospects', json={'full_name': 'Lead Person'}, headers=headers)
    assert resp.status_code == 201
    pid = resp.get_json()['id']
    assert resp.get_json()['status'] == 'New'
    resp = client.patch(f'/prospects/{pid}', json={'status': 'warmlead'}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['status'] == 'WarmLead'
    resp = client.patch(f'/prospects/{pid}', json={'status': 'Hot'}, headers=headers)
    assert resp.status_code == 422
    logs = activity_for('Prospect', pid)
    assert [l.action for l in logs] == ['Create', 'Update']
    assert logs[1].changed_fields == ['status']


def test_delete_missing_prospect(app_context: Flask):
    client = app_context.test_client()
    user, headers = seed_user_with_headers('prospect_missing')
    resp = client.delete('/prospects/p-missing', headers=headers)
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['error']['detail'] == 'Prospect not found'
    logs = activity_for('Prospect', 'p-missing')
    assert len(logs) == 1
    entry = logs[0]
    assert entry.action == 'Delete'
    assert entry.previous_values is None
    assert entry.new_values is None
    assert entry.meta['error'] == 'Prospect not found'
    assert entry.performed_by_id == user.id
