"""
Middleware for request logging and security headers
"""
from flask import request
import logging

logger = logging.getLogger(__name__)


def setup_middleware(app):
    """Setup production middleware"""

    @app.before_request
    def log_request():
        """Log requests in production"""
        if not app.debug:
            logger.info(f"{request.method} {request.path} - {request.remote_addr}")

    @app.after_request
    def set_security_headers(response):
        if not app.debug:
            # Prevent clickjacking
            response.headers['X-Frame-Options'] = 'DENY'
            # Prevent MIME type sniffing
            response.headers['X-Content-Type-Options'] = 'nosniff'
            response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
            # Only add HSTS if using HTTPS
            if request.is_secure:
                response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
            # API responses carry patient data
            if request.path.startswith('/api/'):
                response.headers['Cache-Control'] = 'no-store'
        return response
