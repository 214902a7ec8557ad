from __future__ import annotations
"""Outbound notices (account activation).

Delivery is delegated to the callable configured as ``NOTIFIER``:
``notifier(to: str, subject: str, text: str)``. Without one the notice is only logged.
A failed delivery never fails the request that triggered it.
"""
import logging
from datetime import timedelta
from flask import current_app
from flask_jwt_extended import create_access_token, decode_token

logger = logging.getLogger(__name__)

ACTIVATION_PURPOSE = 'activate'


def issue_activation_token(user) -> str:
    hours = current_app.config.get('ACTIVATION_TOKEN_HOURS', 48)
    return create_access_token(
        identity=user.id,
        additional_claims={'purpose': ACTIVATION_PURPOSE, 'email': user.email},
        expires_delta=timedelta(hours=hours),
    )


def read_activation_token(token: str, email: str | None = None):
    """Return the user id carried by a valid activation token, else None."""
    try:
        claims = decode_token(token)
    except Exception:
        logger.info('Rejected activation token', exc_info=True)
        return None
    if claims.get('purpose') != ACTIVATION_PURPOSE:
        return None
    if email is not None and claims.get('email', '').lower() != email.lower():
        return None
    return claims.get('sub')


def send_notice(to: str, subject: str, text: str) -> bool:
    notifier = current_app.config.get('NOTIFIER')
    if notifier is None:
        logger.info('No notifier configured; notice to %s not sent: %s', to, subject)
        return False
    try:
        notifier(to, subject, text)
        return True
    except Exception:
        logger.exception('Failed to send notice to %s', to)
        return False


def send_activation_notice(user, token: str) -> bool:
    greeting = f"Hello {user.name}," if user.name else "Hello,"
    text = (
        f"{greeting}\n\nYour account has been created and is currently inactive. "
        f"Use this activation token to activate it:\n\n{token}\n"
    )
    return send_notice(user.email, 'Activate your CRM account', text)
