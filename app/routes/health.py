"""
Liveness and readiness checks for the load balancer
"""
from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models.base import to_iso, utcnow
import logging

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__, url_prefix='/health')


@health_bp.route('', methods=['GET'])
def health_check():
    """Answers as long as the process can serve requests; does not touch the database."""
    return jsonify({
        'status': 'healthy',
        'service': 'exam-portal',
        'timestamp': to_iso(utcnow()),
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    try:
        db.session.execute(db.text('SELECT 1'))
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Readiness check failed: %s", e)
        return jsonify({
            'status': 'not_ready',
            'database': 'unavailable',
            'timestamp': to_iso(utcnow()),
        }), 503

    return jsonify({
        'status': 'ready',
        'database': 'connected',
        'timestamp': to_iso(utcnow()),
    }), 200
