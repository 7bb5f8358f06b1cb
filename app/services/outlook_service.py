"""
Outlook calendar integration (Microsoft Graph)
OAuth authorization-code flow, plus event creation with token refresh
"""
import logging
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode

import requests
from flask import current_app

from app.extensions import db
from app.models import User
from app.models.base import utcnow

logger = logging.getLogger(__name__)

MICROSOFT_AUTHORIZE_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/authorize"
MICROSOFT_TOKEN_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/token"
GRAPH_EVENTS_URL = "https://graph.microsoft.com/v1.0/me/calendar/events"

MICROSOFT_SCOPES = " ".join([
    "Calendars.ReadWrite",
    "User.Read",
    "offline_access",
])

# Refresh the access token when it expires within this margin
TOKEN_REFRESH_MARGIN = timedelta(minutes=5)


def is_outlook_configured():
    config = current_app.config
    return bool(config.get('MICROSOFT_CLIENT_ID') and config.get('MICROSOFT_CLIENT_SECRET'))


def callback_url():
    return f"{current_app.config['APP_URL'].rstrip('/')}/api/auth/microsoft/callback"


def build_authorize_url(state):
    params = {
        'client_id': current_app.config['MICROSOFT_CLIENT_ID'],
        'response_type': 'code',
        'redirect_uri': callback_url(),
        'scope': MICROSOFT_SCOPES,
        'state': state,
        'response_mode': 'query',
    }
    return f"{MICROSOFT_AUTHORIZE_URL}?{urlencode(params)}"


def _token_request(data):
    config = current_app.config
    data = dict(data, client_id=config['MICROSOFT_CLIENT_ID'], client_secret=config['MICROSOFT_CLIENT_SECRET'])
    try:
        response = requests.post(MICROSOFT_TOKEN_URL, data=data, timeout=config['OUTLOOK_REQUEST_TIMEOUT'])
    except requests.RequestException as e:
        logger.error(f"Microsoft token request failed: {e}")
        return None
    if response.status_code != 200:
        logger.error(f"Microsoft token request rejected ({response.status_code}): {response.text}")
        return None
    return response.json()


def exchange_code(code):
    """
    Exchange an authorization code for tokens.

    Returns:
        dict: Token response with access_token and refresh_token, or None
    """
    tokens = _token_request({
        'code': code,
        'redirect_uri': callback_url(),
        'grant_type': 'authorization_code',
    })
    if not tokens or not tokens.get('access_token') or not tokens.get('refresh_token'):
        return None
    return tokens


def store_tokens(user: User, tokens: dict):
    user.microsoft_access_token = tokens['access_token']
    if tokens.get('refresh_token'):
        user.microsoft_refresh_token = tokens['refresh_token']
    user.microsoft_token_expires_at = utcnow() + timedelta(seconds=int(tokens.get('expires_in') or 3600))
    db.session.commit()


def get_access_token(user: User) -> Optional[str]:
    """
    Get a valid access token for the user, refreshing it if needed.
    Returns None if the user has not connected a calendar or refresh fails.
    """
    if not user.microsoft_refresh_token:
        return None

    expires_at = user.microsoft_token_expires_at
    if user.microsoft_access_token and expires_at and expires_at > utcnow() + TOKEN_REFRESH_MARGIN:
        return user.microsoft_access_token

    if not is_outlook_configured():
        return None

    logger.info("Refreshing Outlook access token for user %s", user.id)
    tokens = _token_request({
        'refresh_token': user.microsoft_refresh_token,
        'grant_type': 'refresh_token',
    })
    if not tokens or not tokens.get('access_token'):
        return None

    store_tokens(user, tokens)
    return tokens['access_token']


def create_event(user: User, subject, start, end, body=None) -> Optional[str]:
    """
    Create an event in the user's Outlook calendar.

    Args:
        user: Calendar owner
        subject: Event title
        start, end: Naive UTC datetimes
        body: Plain-text description (optional)

    Returns:
        str: Graph event id, or None if not connected or the request failed
    """
    token = get_access_token(user)
    if not token:
        return None

    event = {
        'subject': subject,
        'start': {'dateTime': start.isoformat(), 'timeZone': 'UTC'},
        'end': {'dateTime': end.isoformat(), 'timeZone': 'UTC'},
    }
    if body:
        event['body'] = {'contentType': 'text', 'content': body}

    try:
        response = requests.post(
            GRAPH_EVENTS_URL,
            json=event,
            headers={'Authorization': f'Bearer {token}'},
            timeout=current_app.config['OUTLOOK_REQUEST_TIMEOUT'],
        )
    except requests.RequestException as e:
        logger.error(f"Outlook event creation failed for user {user.id}: {e}")
        return None

    if not response.ok:
        logger.error(f"Outlook event creation rejected ({response.status_code}) for user {user.id}")
        return None
    return response.json().get('id')
