from flask import Flask
from crm import get_db
from crm.models.user import User
from crm.services.notifications import issue_activation_token
from tests.test_utils_seed import ensure_user, unique_email, activity_for


def test_signup_verify_login(app_context: Flask, notices):
    client = app_context.test_client()
    email = unique_email('signup')
    resp = client.post('/auth/signup', json={'email': email, 'password': 'secret', 'name': 'New Person'})
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    uid = body['user']['id']
    assert body['user']['status'] == 'Inactive'
    assert body['activation_sent'] is True
    assert notices[-1]['to'] == email
    create_logs = activity_for('User', uid)
    assert [l.action for l in create_logs] == ['Create']
    assert create_logs[0].performed_by_id == uid

    # inactive accounts cannot log in yet
    resp = client.post('/auth/login', json={'email': email, 'password': 'secret'})
    assert resp.status_code == 401

    token = notices[-1]['text'].strip().splitlines()[-1]
    resp = client.get(f'/auth/verify?token={token}')
    assert resp.status_code == 200
    assert resp.get_json()['user']['status'] == 'Active'
    logs = activity_for('User', uid)
    assert logs[-1].action == 'Update'
    assert logs[-1].changed_fields == ['status']
    assert logs[-1].meta['via'] == 'verify'

    resp = client.post('/auth/login', json={'email': email, 'password': 'secret'})
    assert resp.status_code == 200
    assert 'access_token' in resp.get_json()
    assert get_db().get(User, uid).last_login is not None


def test_signup_errors(app_context: Flask):
    client = app_context.test_client()
    assert client.post('/auth/signup', json={'email': 'x@example.com'}).status_code == 400
    email = unique_email('dup')
    assert client.post('/auth/signup', json={'email': email, 'password': 'pw'}).status_code == 201
    resp = client.post('/auth/signup', json={'email': email, 'password': 'pw'})
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'] == 'email already registered'


def test_login_bad_credentials(app_context: Flask):
    client = app_context.test_client()
    email = unique_email('login_bad')
    ensure_user(email, password='right')
    assert client.post('/auth/login', json={'email': email, 'password': 'wrong'}).status_code == 401
    assert client.post('/auth/login', json={'email': 'nobody@example.com', 'password': 'x'}).status_code == 401
    assert client.post('/auth/login', json={}).status_code == 400


def test_resend_verification(app_context: Flask, notices):
    client = app_context.test_client()
    invited = ensure_user(unique_email('invited'), status=User.STATUS_INVITE)
    resp = client.post('/auth/verify', json={'email': invited.email})
    assert resp.status_code == 200
    assert resp.get_json()['action'] == 'set_password'
    inactive = ensure_user(unique_email('inactive'), status=User.STATUS_INACTIVE)
    assert client.post('/auth/verify', json={'email': inactive.email}).get_json()['action'] == 'verify'
    active = ensure_user(unique_email('active'))
    assert client.post('/auth/verify', json={'email': active.email}).status_code == 400
    assert len(notices) == 2


def test_update_password_activates(app_context: Flask):
    client = app_context.test_client()
    invited = ensure_user(unique_email('setpw'), status=User.STATUS_INVITE)
    token = issue_activation_token(invited)
    resp = client.post('/auth/update-password', json={'email': invited.email, 'password': 'fresh', 'token': token})
    assert resp.status_code == 200
    assert resp.get_json()['user']['status'] == 'Active'
    logs = activity_for('User', invited.id)
    assert logs[-1].changed_fields == ['status']
    assert 'password_hash' not in (logs[-1].new_values or {})
    resp = client.post('/auth/login', json={'email': invited.email, 'password': 'fresh'})
    assert resp.status_code == 200


def test_update_password_rejects_foreign_token(app_context: Flask):
    client = app_context.test_client()
    a = ensure_user(unique_email('tok_a'), status=User.STATUS_INVITE)
    b = ensure_user(unique_email('tok_b'), status=User.STATUS_INVITE)
    token = issue_activation_token(a)
    resp = client.post('/auth/update-password', json={'email': b.email, 'password': 'x', 'token': token})
    assert resp.status_code == 400
    assert client.get('/auth/verify?token=garbage').status_code == 400
