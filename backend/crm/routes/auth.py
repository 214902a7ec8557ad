import logging
from flask import Blueprint, request, abort
from sqlalchemy import select
from werkzeug.security import generate_password_hash
from flask_jwt_extended import create_access_token
from crm import get_db
from crm.models.activity import ActivityAction
from crm.models.user import User, new_id, utcnow
from crm.routes.users import user_json
from crm.schemas.user import SignupRequest, LoginRequest, VerifyRequest, UpdatePasswordRequest
from crm.services.activity import AuditOptions, ActivityLogStore, with_activity_logging
from crm.services.notifications import issue_activation_token, read_activation_token, send_activation_notice
from crm.services.repository import AuditedRepository
from crm.utils.validation import parse_payload

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def _find_by_email(session, email: str):
    return session.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()


def _activate(session, user_id: str, changes: dict, via: str) -> User:
    repo = AuditedRepository(User, 'User', user_json, session)
    changes = dict(changes, status=User.STATUS_ACTIVE)
    # self-service: the account owner is the acting user
    return repo.update(user_id, changes, user_id, metadata={'via': via})


@auth_bp.post('/signup')
def signup():
    data = request.get_json(silent=True) or {}
    if not data.get('email') or not data.get('password'):
        abort(400, description='email & password required')
    payload = parse_payload(SignupRequest, data)
    session = get_db()
    email = payload.email.lower()
    if _find_by_email(session, email):
        abort(400, description='email already registered')

    uid = new_id()

    def operation():
        user = User(id=uid, email=email, name=payload.name, status=User.STATUS_INACTIVE)
        user.set_password(payload.password)
        session.add(user)
        session.commit()
        return user

    user = with_activity_logging(operation, AuditOptions(
        entity_type='User',
        entity_id=uid,
        action=ActivityAction.CREATE,
        user_id=uid,
        get_current_data=AuditedRepository(User, 'User', user_json, session).audit_view,
        metadata={'via': 'signup'},
    ), ActivityLogStore(lambda: session))

    sent = send_activation_notice(user, issue_activation_token(user))
    return {'user': user_json(user), 'activation_sent': sent}, 201


@auth_bp.post('/login')
def login():
    data = request.get_json(silent=True) or {}
    if not data.get('email') or not data.get('password'):
        abort(400, description='email & password required')
    payload = parse_payload(LoginRequest, data)
    session = get_db()
    user = _find_by_email(session, payload.email)
    if not user or not user.verify_password(payload.password):
        abort(401, description='invalid credentials')
    if user.status != User.STATUS_ACTIVE:
        abort(401, description='account is not active')
    try:
        user.last_login = utcnow()
        session.commit()
    except Exception:
        logger.warning('Could not record last_login for %s', user.id, exc_info=True)
        session.rollback()
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(user.id))
    return {'access_token': token}


@auth_bp.post('/verify')
def resend_verification():
    payload = parse_payload(VerifyRequest, request.get_json(silent=True))
    user = _find_by_email(get_db(), payload.email)
    if not user or user.status == User.STATUS_DELETED:
        abort(404, description='User not found')
    if user.status == User.STATUS_ACTIVE:
        abort(400, description='account already active')
    action = 'set_password' if user.status == User.STATUS_INVITE else 'verify'
    sent = send_activation_notice(user, issue_activation_token(user))
    return {'success': True, 'action': action, 'activation_sent': sent}


@auth_bp.get('/verify')
def verify():
    token = request.args.get('token')
    if not token:
        abort(400, description='token required')
    uid = read_activation_token(token)
    user = get_db().get(User, uid) if uid else None
    if not user or user.status == User.STATUS_DELETED:
        abort(400, description='invalid or expired token')
    if user.status == User.STATUS_ACTIVE:
        return {'success': True, 'user': user_json(user)}
    user = _activate(get_db(), user.id, {}, 'verify')
    return {'success': True, 'user': user_json(user)}


@auth_bp.post('/update-password')
def update_password():
    payload = parse_payload(UpdatePasswordRequest, request.get_json(silent=True))
    session = get_db()
    uid = read_activation_token(payload.token, email=payload.email)
    user = session.get(User, uid) if uid else None
    if not user or user.status == User.STATUS_DELETED:
        abort(400, description='invalid or expired token')
    user = _activate(session, user.id, {'password_hash': generate_password_hash(payload.password)}, 'update_password')
    return {'success': True, 'user': user_json(user)}
