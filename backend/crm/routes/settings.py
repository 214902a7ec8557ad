from flask import Blueprint, request
from sqlalchemy import select
from crm import get_db
from crm.models.email_settings import EmailSettings
from crm.models.user import new_id
from crm.decorators.auth import require_user, current_user_id
from crm.schemas.settings import EmailSettingsUpdate
from crm.services.repository import AuditedRepository
from crm.utils.validation import parse_payload

settings_bp = Blueprint('settings', __name__)


def _settings_for(session, user_id: str):
    return session.execute(select(EmailSettings).where(EmailSettings.user_id == user_id)).scalar_one_or_none()


@settings_bp.get('/email')
@require_user
def get_email_settings():
    s = _settings_for(get_db(), current_user_id())
    if s is None:
        return {'data': None}
    return {'data': _settings_json(s)}


@settings_bp.put('/email')
@require_user
def put_email_settings():
    """Create or update the caller's email settings. The password is write-only."""
    session = get_db()
    user_id = current_user_id()
    changes = parse_payload(EmailSettingsUpdate, request.get_json(silent=True)).model_dump(exclude_unset=True)
    repo = AuditedRepository(EmailSettings, 'EmailSettings', _settings_json, session)
    existing = _settings_for(session, user_id)
    if existing is None:
        fields = dict(changes, id=new_id(), user_id=user_id)
        s = repo.create(fields, user_id, metadata={'fields': sorted(changes)})
        return {'data': _settings_json(s)}, 201
    s = repo.update(existing.id, changes, user_id)
    return {'data': _settings_json(s)}


def _settings_json(s: EmailSettings):
    return {
        'id': s.id,
        'user_id': s.user_id,
        'host': s.host,
        'port': s.port,
        'sender': s.sender,
        'username': s.username,
        'has_password': bool(s.password),
        'updated_at': s.updated_at.isoformat() if s.updated_at else None,
    }
