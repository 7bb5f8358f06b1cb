from flask import Blueprint, jsonify, current_app, session
from flask_login import login_user, logout_user, login_required, current_user
from app.models import User
from app.utils.decorators import json_body
from app.utils.rate_limit import get_limiter
import logging

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/login', methods=['POST'])
def login():
    """Login endpoint - checks credentials and starts a session"""
    data = json_body()

    if data is None:
        return jsonify({
            'success': False,
            'error': 'Invalid JSON'
        }), 400

    email = data.get('email')
    password = data.get('password')
    if not isinstance(email, str) or not isinstance(password, str):
        return jsonify({
            'success': False,
            'error': 'Email and password required'
        }), 400

    email = User.normalize_email(email)
    if not email or not password:
        return jsonify({
            'success': False,
            'error': 'Email and password required'
        }), 400

    # Credential checks are limited per email, separately from the API limiter
    limiter = get_limiter(current_app, 'auth')
    allowed, _ = limiter.hit(email)
    if not allowed:
        logger.warning("Sign-in locked out for %s", email)
        response = jsonify({
            'success': False,
            'error': 'Too many sign-in attempts. Please try again later.'
        })
        response.headers['Retry-After'] = str(limiter.retry_after(email))
        return response, 429

    user = User.query.filter_by(email=email).first()

    # Unknown email and wrong password look the same to the caller
    if not user or not user.check_password(password):
        return jsonify({
            'success': False,
            'error': 'Invalid email or password'
        }), 401

    login_user(user, remember=True)
    session.permanent = True
    logger.info("User %s signed in", user.id)

    return jsonify({
        'success': True,
        'data': user.to_dict()
    }), 200


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({
        'success': True,
        'message': 'Logged out successfully'
    }), 200


@auth_bp.route('/me', methods=['GET'])
@login_required
def get_current_user():
    """Get the signed-in user"""
    return jsonify({
        'success': True,
        'data': current_user.to_dict()
    }), 200
