from flask import Flask
from tests.test_utils_seed import seed_user_with_headers, ensure_company, ensure_customer, activity_for


def test_deal_crud_with_activity(app_context: Flask):
    client = app_context.test_client()
    user, headers = seed_user_with_headers('deal_user')
    company = ensure_company(user, 'Deal Co')
    contact = ensure_customer(user, 'Deal Contact', company)
    # Create
    resp = client.post('/deals', json={
        'deal_name': 'Big Sale', 'amount': 100, 'stage': 'new',
        'company_id': company.id, 'contact_id': contact.id, 'tags': ['q1'],
    }, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    deal = resp.get_json()
    did = deal['id']
    assert deal['stage'] == 'New'
    assert deal['owner_id'] == user.id
    assert deal['currency'] == 'USD'
    # Update
    resp = client.patch(f'/deals/{did}', json={'amount': 150, 'stage': 'New'}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['amount'] == 150
    # Get
    resp = client.get(f'/deals/{did}', headers=headers)
    assert resp.status_code == 200
    assert 'ETag' in resp.headers
    # Delete
    resp = client.delete(f'/deals/{did}', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json() == {'success': True}
    assert client.get(f'/deals/{did}', headers=headers).status_code == 404

    logs = activity_for('Deal', did)
    assert [l.action for l in logs] == ['Create', 'Update', 'Delete']
    create, update, delete = logs
    assert create.previous_values is None
    assert create.new_values['deal_name'] == 'Big Sale'
    assert 'updated_at' not in create.new_values
    assert update.changed_fields == ['amount']
    assert update.meta['fields'] == ['amount', 'stage']
    assert delete.previous_values['amount'] == 150
    assert delete.new_values is None
    assert 'deleted_at' in delete.meta
    assert all(l.performed_by_id == user.id for l in logs)


def test_deal_validation_errors(app_context: Flask):
    client = app_context.test_client()
    _, headers = seed_user_with_headers('deal_invalid')
    resp = client.post('/deals', json={'deal_name': '', 'amount': -5, 'stage': 'Nope'}, headers=headers)
    assert resp.status_code == 422
    err = resp.get_json()['error']
    assert set(err['fields']) >= {'deal_name', 'amount', 'stage'}
    resp = client.post('/deals', json={'deal_name': 'Ghost', 'amount': 1, 'company_id': 'missing'}, headers=headers)
    assert resp.status_code == 422
    assert 'company_id' in resp.get_json()['error']['fields']
    resp = client.post('/deals', json=['not', 'an', 'object'], headers=headers)
    assert resp.status_code == 422
    assert resp.get_json()['error']['form'] == ['Expected a JSON object']


def test_deal_update_rejects_null_required_field(app_context: Flask):
    client = app_context.test_client()
    _, headers = seed_user_with_headers('deal_null')
    did = client.post('/deals', json={'deal_name': 'Nullable?', 'amount': 5}, headers=headers).get_json()['id']
    resp = client.patch(f'/deals/{did}', json={'stage': None}, headers=headers)
    assert resp.status_code == 422
    assert 'stage' in resp.get_json()['error']['fields']


def test_missing_deal_update_logs_failure(app_context: Flask):
    client = app_context.test_client()
    user, headers = seed_user_with_headers('deal_missing')
    resp = client.patch('/deals/does-not-exist', json={'amount': 1}, headers=headers)
    assert resp.status_code == 404
    assert resp.get_json()['error']['detail'] == 'Deal not found'
    logs = activity_for('Deal', 'does-not-exist')
    assert len(logs) == 1
    assert logs[0].action == 'Update'
    assert logs[0].new_values is None
    assert logs[0].meta['error'] == 'Deal not found'


def test_deal_list_filters_and_sort(app_context: Flask):
    client = app_context.test_client()
    user, headers = seed_user_with_headers('deal_list')
    for name, amount, stage in [('Alpha', 10, 'New'), ('Bravo', 30, 'Won'), ('Charlie', 20, 'New')]:
        client.post('/deals', json={'deal_name': name, 'amount': amount, 'stage': stage}, headers=headers)
    resp = client.get(f'/deals?owner_id={user.id}&stage=New&sort=-amount', headers=headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert [d['deal_name'] for d in body['data']] == ['Charlie', 'Alpha']
    assert body['pagination']['total'] == 2
    assert client.get('/deals?stage=Bogus', headers=headers).status_code == 400
    assert client.get('/deals?sort=password', headers=headers).status_code == 400


def test_deal_stats_endpoint(app_context: Flask):
    client = app_context.test_client()
    user, headers = seed_user_with_headers('deal_stats')
    client.post('/deals', json={'deal_name': 'Won one', 'amount': 40, 'stage': 'Won'}, headers=headers)
    client.post('/deals', json={'deal_name': 'Open one', 'amount': 60}, headers=headers)
    resp = client.get(f'/deals/stats?range=bogus&owner_id={user.id}', headers=headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['range'] == 'this_month'
    assert body['filters']['owner_id'] == user.id
    data = body['data']
    assert data['total_deals'] == 2
    assert data['won_deals'] == 1
    assert data['expected_revenue'] == 100
    assert data['conversion_rate'] == 50
    assert data['changes']['new_deals_change_percent'] == 100


def test_deals_require_auth(client):
    resp = client.get('/deals')
    assert resp.status_code == 401
