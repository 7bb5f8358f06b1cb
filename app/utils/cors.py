"""
CORS Configuration
The API is called with the session cookie, so origins are listed explicitly
"""

CORS_CONFIG = {
    "methods": ["GET", "POST", "DELETE", "OPTIONS", "PATCH"],
    "allow_headers": [
        "Content-Type",
        "X-Requested-With",
        "Accept",
        "Origin",
    ],
    "expose_headers": [
        "Content-Type",
        "Retry-After",
    ],
    "supports_credentials": True,
    "max_age": 86400,  # 24 hours
}


def init_cors(app):
    """
    Initialize CORS for the API routes
    """
    from flask_cors import CORS

    origins = app.config.get('CORS_ORIGINS') or []
    CORS(app,
         resources={r"/api/*": {"origins": origins}},
         methods=CORS_CONFIG["methods"],
         allow_headers=CORS_CONFIG["allow_headers"],
         expose_headers=CORS_CONFIG["expose_headers"],
         supports_credentials=CORS_CONFIG["supports_credentials"],
         max_age=CORS_CONFIG["max_age"])

    app.logger.info(f"CORS enabled for: {', '.join(origins) or 'no origins'}")
