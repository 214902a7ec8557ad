from tests.test_utils_seed import seed_user_with_headers


def test_etag_conditional_list(app_context):
    client = app_context.test_client()
    user, headers = seed_user_with_headers('etag_list')
    client.post('/companies', json={'full_name': 'ETag Co', 'industry': 'Tech'}, headers=headers)
    url = f'/companies?owner_id={user.id}&limit=5'
    first = client.get(url, headers=headers)
    assert first.status_code == 200
    etag = first.headers.get('ETag')
    assert etag
    assert 'X-Last-Modified-ISO' in first.headers
    second = client.get(url, headers={**headers, 'If-None-Match': etag})
    assert second.status_code == 304
    assert second.headers.get('ETag') == etag
    # If-Modified-Since should also 304 when using Last-Modified from first response
    lm = first.headers.get('Last-Modified')
    third = client.get(url, headers={**headers, 'If-Modified-Since': lm})
    assert third.status_code == 304


def test_etag_changes_after_update(app_context):
    client = app_context.test_client()
    _, headers = seed_user_with_headers('etag_single')
    cid = client.post('/customers', json={'full_name': 'Before'}, headers=headers).get_json()['id']
    first = client.get(f'/customers/{cid}', headers=headers)
    etag = first.headers['ETag']
    assert client.get(f'/customers/{cid}', headers={**headers, 'If-None-Match': etag}).status_code == 304
    client.patch(f'/customers/{cid}', json={'full_name': 'After'}, headers=headers)
    second = client.get(f'/customers/{cid}', headers={**headers, 'If-None-Match': etag})
    assert second.status_code == 200
    assert second.headers['ETag'] != etag
    assert client.get(f'/customers/{cid}', headers=headers).get_json()['full_name'] == 'After'


def test_pagination_meta(app_context):
    client = app_context.test_client()
    user, headers = seed_user_with_headers('page_meta')
    for i in range(3):
        client.post('/prospects', json={'full_name': f'Paged {i}'}, headers=headers)
    body = client.get(f'/prospects?owner_id={user.id}&limit=2&offset=1', headers=headers).get_json()
    assert body['pagination'] == {'total': 3, 'limit': 2, 'offset': 1, 'returned': 2}
    assert client.get('/prospects?limit=x', headers=headers).status_code == 400
