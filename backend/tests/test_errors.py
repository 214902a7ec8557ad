def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    # Flask default 404 should be wrapped by error handler
    assert resp.status_code == 404
    body = resp.get_json()
    assert 'error' in body
    assert body['error']['status'] == 404
    assert 'detail' in body['error']


def test_validation_error_shape(app_context):
    from tests.test_utils_seed import seed_user_with_headers
    client = app_context.test_client()
    _, headers = seed_user_with_headers('err_shape')
    resp = client.post('/customers', json={'email': 'bad'}, headers=headers)
    assert resp.status_code == 422
    err = resp.get_json()['error']
    assert err['status'] == 422
    assert err['title'] == 'Unprocessable Entity'
    assert err['detail'] == 'Validation error'
    assert set(err['fields']) == {'full_name', 'email'}
    assert err['form'] == []


def test_internal_error_shape(app_context, monkeypatch):
    from tests.test_utils_seed import seed_user_with_headers
    import crm.routes.deals as deals_mod
    client = app_context.test_client()
    _, headers = seed_user_with_headers('err_internal')

    def boom(*a, **k):
        raise RuntimeError('explode')
    monkeypatch.setattr(deals_mod, 'compute_deal_stats', boom)
    resp = client.get('/deals/stats', headers=headers)
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error']['status'] == 500
    assert body['error']['title'] == 'Internal Server Error'


def test_healthz(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}
