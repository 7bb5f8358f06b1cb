"""
Outlook calendar OAuth (Microsoft identity platform, authorization-code flow)

Both endpoints are browser redirects, so failures are reported back to the
settings page as query parameters rather than JSON errors.
"""
import secrets
from urllib.parse import urlencode

from flask import Blueprint, current_app, redirect, request
from flask_login import current_user

from app.services import outlook_service
import logging

logger = logging.getLogger(__name__)

microsoft_bp = Blueprint('microsoft', __name__, url_prefix='/api/auth/microsoft')

STATE_COOKIE = 'outlook_oauth_state'
STATE_MAX_AGE = 600  # 10 minutes


def _app_url(path):
    return f"{current_app.config['APP_URL'].rstrip('/')}{path}"


def _settings_redirect(outcome, message=None):
    params = {'outlook': outcome}
    if message:
        params['message'] = message
    return redirect(f"{_app_url('/dashboard/settings')}?{urlencode(params)}")


def _signin_redirect():
    return redirect(_app_url('/auth/signin'))


@microsoft_bp.route('', methods=['GET'])
def connect():
    """Start the OAuth flow: set an anti-forgery state cookie and redirect to Microsoft."""
    if not current_user.is_authenticated:
        return _signin_redirect()

    if not outlook_service.is_outlook_configured():
        return _settings_redirect('error', 'not_configured')

    state = secrets.token_urlsafe(24)
    response = redirect(outlook_service.build_authorize_url(state))
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=STATE_MAX_AGE,
        httponly=True,
        secure=bool(current_app.config.get('SESSION_COOKIE_SECURE')),
        samesite='Lax',
        path='/',
    )
    return response


@microsoft_bp.route('/callback', methods=['GET'])
def callback():
    if not current_user.is_authenticated:
        return _signin_redirect()

    code = request.args.get('code')
    state = request.args.get('state')
    error = request.args.get('error')
    saved_state = request.cookies.get(STATE_COOKIE)

    if error:
        logger.warning("Outlook authorization denied for user %s: %s", current_user.id, error)
        response = _settings_redirect('error', error)
    elif not code or not state or not saved_state or not secrets.compare_digest(state.encode(), saved_state.encode()):
        response = _settings_redirect('error', 'invalid_callback')
    elif not outlook_service.is_outlook_configured():
        response = _settings_redirect('error', 'not_configured')
    else:
        tokens = outlook_service.exchange_code(code)
        if tokens is None:
            response = _settings_redirect('error', 'token_exchange_failed')
        else:
            outlook_service.store_tokens(current_user, tokens)
            logger.info("Outlook connected for user %s", current_user.id)
            response = _settings_redirect('connected')

    # State is single-use
    response.delete_cookie(STATE_COOKIE, path='/')
    return response
