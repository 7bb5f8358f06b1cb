from flask import Flask, jsonify, has_app_context
from werkzeug.exceptions import HTTPException
from .extensions import db, migrate, bcrypt, login_manager, celery
import logging
import os

# Setup basic logging
logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Create Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    from app.config import config, get_config, DEFAULT_SECRET_KEY
    if config_name:
        app.config.from_object(config.get(config_name, config['default']))
    else:
        app.config.from_object(get_config())

    # Ensure production mode if FLASK_ENV is production
    if os.getenv('FLASK_ENV') == 'production':
        app.config['DEBUG'] = False
        app.config['TESTING'] = False

    if not app.debug and not app.testing and app.config['SECRET_KEY'] == DEFAULT_SECRET_KEY:
        raise RuntimeError("SECRET_KEY must be set in production")

    # Initialize extensions first (before error handlers)
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    login_manager.init_app(app)

    # Initialize CORS
    from app.utils.cors import init_cors
    init_cors(app)

    # Initialize Celery
    celery.conf.update(
        broker_url=app.config['CELERY_BROKER_URL'],
        result_backend=app.config['CELERY_RESULT_BACKEND'],
        task_serializer=app.config['CELERY_TASK_SERIALIZER'],
        accept_content=app.config['CELERY_ACCEPT_CONTENT'],
        result_serializer=app.config['CELERY_RESULT_SERIALIZER'],
        timezone=app.config['CELERY_TIMEZONE'],
        enable_utc=app.config['CELERY_ENABLE_UTC'],
        task_always_eager=app.config['CELERY_TASK_ALWAYS_EAGER'],
        task_eager_propagates=False,
    )

    class FlaskAppContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""
        def __call__(self, *args, **kwargs):
            # Eager tasks run inside the calling request's context
            if has_app_context():
                return self.run(*args, **kwargs)
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = FlaskAppContextTask

    # Rate limiters and notification dispatch
    from app.utils.rate_limit import init_rate_limiters
    from app.services.notification_service import init_notifications
    init_rate_limiters(app)
    init_notifications(app)

    # Global error handlers
    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal Server Error: {error}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Internal server error. Check server logs for details.'
        }), 500

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': 'Endpoint not found'
        }), 404

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({
                'success': False,
                'error': e.description
            }), e.code
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        db.session.rollback()
        return jsonify({
            'success': False,
            'error': 'Internal server error. Check server logs for details.'
        }), 500

    # Setup logging
    if not app.debug and not app.testing:
        from logging.handlers import RotatingFileHandler

        log_file = app.config['LOG_FILE']
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10240000,
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(app.config['LOG_LEVEL'].upper())
        # app.logger is the 'app' logger, parent of every module logger in the package
        app.logger.addHandler(file_handler)
        logging.getLogger('tasks').addHandler(file_handler)
        app.logger.setLevel(app.config['LOG_LEVEL'].upper())
        app.logger.info('Application startup')

    # Request logging and security headers
    from app.middleware import setup_middleware
    setup_middleware(app)

    # Configure Flask-Login
    login_manager.session_protection = 'strong'

    # User loader function - Flask-Login calls this to get user
    @login_manager.user_loader
    def load_user(user_id):
        from app.models import User
        return db.session.get(User, user_id)

    # Unauthorized handler - returns JSON instead of redirect
    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({
            'success': False,
            'error': 'Authentication required'
        }), 401

    # Import models to register them with SQLAlchemy
    with app.app_context():
        from . import models  # noqa: F401

        # Register blueprints
        from .routes import auth_bp, microsoft_bp, appointment_bp, dashboard_bp, doctors_bp, settings_bp, health_bp
        app.register_blueprint(health_bp)  # Register health check first
        app.register_blueprint(auth_bp)
        app.register_blueprint(microsoft_bp)
        app.register_blueprint(appointment_bp)
        app.register_blueprint(dashboard_bp)
        app.register_blueprint(doctors_bp)
        app.register_blueprint(settings_bp)

    return app
