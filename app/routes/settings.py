"""
Per-user settings: password change and Outlook connection status
"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from app.extensions import db
from app.services.outlook_service import is_outlook_configured
from app.utils.decorators import json_body
from app.utils.validators import validate_password_change, joined_errors
import logging

logger = logging.getLogger(__name__)

settings_bp = Blueprint('settings', __name__, url_prefix='/api/settings')


@settings_bp.route('/password', methods=['PATCH'])
@login_required
def change_password():
    data = json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Invalid JSON'}), 400

    payload, errors = validate_password_change(data)
    if errors:
        return jsonify({
            'success': False,
            'error': joined_errors(errors)
        }), 400

    if not current_user.password_hash:
        return jsonify({
            'success': False,
            'error': 'User not found or has no password set.'
        }), 404

    if not current_user.check_password(payload['current_password']):
        return jsonify({
            'success': False,
            'error': 'Current password is incorrect.'
        }), 400

    current_user.set_password(payload['new_password'])
    db.session.commit()
    logger.info("Password changed for user %s", current_user.id)

    return jsonify({
        'success': True,
        'message': 'Password updated'
    }), 200


@settings_bp.route('/outlook', methods=['GET'])
@login_required
def outlook_status():
    """Whether Outlook is configured and the caller has connected a calendar"""
    return jsonify({
        'success': True,
        'data': {
            'configured': is_outlook_configured(),
            'connected': current_user.has_outlook,
        }
    }), 200


@settings_bp.route('/outlook', methods=['DELETE'])
@login_required
def disconnect_outlook():
    current_user.clear_outlook_tokens()
    db.session.commit()
    logger.info("Outlook disconnected for user %s", current_user.id)
    return jsonify({
        'success': True,
        'data': {
            'configured': is_outlook_configured(),
            'connected': False,
        }
    }), 200
