from functools import wraps
from flask import jsonify, current_app, request
from flask_login import current_user

from app.utils.rate_limit import get_limiter


def require_role(*roles):
    """
    Decorator to require specific roles
    Usage: @require_role(Role.RECEPTION)
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            """
            Require that the signed-in user has one of the given roles.
            Must be used together with @login_required on the route.
            """
            if not current_user.is_authenticated:
                return jsonify({
                    'success': False,
                    'error': 'Authentication required'
                }), 401

            if current_user.role not in roles:
                return jsonify({
                    'success': False,
                    'error': 'Forbidden'
                }), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def rate_limit(limiter_name='api'):
    """
    Decorator applying a fixed-window limit keyed by the signed-in user's id.
    Must be used together with @login_required on the route.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            limiter = get_limiter(current_app, limiter_name)
            allowed, _ = limiter.hit(current_user.id)
            if not allowed:
                response = jsonify({
                    'success': False,
                    'error': 'Too many requests'
                })
                response.headers['Retry-After'] = str(limiter.retry_after(current_user.id))
                return response, 429
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def json_body():
    """Return the request JSON object, or None if the body is not a JSON object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None
