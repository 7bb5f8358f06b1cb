from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError
from app.extensions import db
from app.models import Role
from app.services import appointment_service
from app.services.appointment_service import AppointmentNotFound, PastAppointmentDate
from app.services.notification_service import notify_appointment_created
from app.utils.decorators import require_role, rate_limit, json_body
from app.utils.validators import (
    validate_appointment_create,
    validate_appointment_update,
    first_error,
    flatten_errors,
)
import logging

logger = logging.getLogger(__name__)

appointment_bp = Blueprint('appointment', __name__, url_prefix='/api/appointments')


def _invalid_json():
    return jsonify({
        'success': False,
        'error': 'Invalid JSON'
    }), 400


def _not_found():
    return jsonify({
        'success': False,
        'error': 'Appointment not found'
    }), 404


@appointment_bp.route('', methods=['GET'])
@login_required
@rate_limit()
def list_appointments():
    """
    List appointments visible to the signed-in user, ordered by date.
    Reception sees everything; doctors see their own non-cancelled ones.
    Past-due appointments are completed first.
    """
    appointment_service.auto_complete_past_due()
    return jsonify({
        'success': True,
        'data': appointment_service.list_appointments(current_user)
    }), 200


@appointment_bp.route('', methods=['POST'])
@login_required
@rate_limit()
@require_role(Role.RECEPTION)
def create_appointment():
    """
    Create an appointment (status: scheduled).

    Notifications (calendar events, doctor email, patient email and SMS)
    are queued after the insert and never affect the response.
    """
    data = json_body()
    if data is None:
        return _invalid_json()

    payload, errors = validate_appointment_create(data)
    if errors:
        return jsonify({
            'success': False,
            'error': first_error(errors)
        }), 400

    try:
        appointment = appointment_service.create_appointment(payload)
    except PastAppointmentDate as e:
        return jsonify({
            'success': False,
            'error': str(e)
        }), 400
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to create appointment: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Failed to create appointment'
        }), 500

    notify_appointment_created(appointment, current_user)

    return jsonify({
        'success': True,
        'data': appointment_service.serialize_one(appointment)
    }), 201


@appointment_bp.route('/<appointment_id>', methods=['GET'])
@login_required
@rate_limit()
def get_appointment(appointment_id):
    try:
        appointment = appointment_service.get_appointment(appointment_id)
    except AppointmentNotFound:
        return _not_found()

    if not appointment_service.can_view(current_user, appointment):
        return jsonify({
            'success': False,
            'error': 'Forbidden'
        }), 403

    return jsonify({
        'success': True,
        'data': appointment_service.serialize_one(appointment)
    }), 200


@appointment_bp.route('/<appointment_id>', methods=['PATCH'])
@login_required
@rate_limit()
@require_role(Role.RECEPTION)
def update_appointment(appointment_id):
    """Partial update; fields absent from the body are left unchanged."""
    data = json_body()
    if data is None:
        return _invalid_json()

    payload, errors = validate_appointment_update(data)
    if errors:
        return jsonify({
            'success': False,
            'error': flatten_errors(errors)
        }), 400

    try:
        appointment = appointment_service.update_appointment(appointment_id, payload)
    except AppointmentNotFound:
        return _not_found()
    except PastAppointmentDate as e:
        return jsonify({
            'success': False,
            'error': flatten_errors({'appointmentDate': [str(e)]})
        }), 400
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to update appointment {appointment_id}: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Failed to update appointment'
        }), 500

    return jsonify({
        'success': True,
        'data': appointment_service.serialize_one(appointment)
    }), 200


@appointment_bp.route('/<appointment_id>', methods=['DELETE'])
@login_required
@rate_limit()
@require_role(Role.RECEPTION)
def cancel_appointment(appointment_id):
    """Cancel an appointment. Rows are never hard-deleted."""
    try:
        appointment = appointment_service.cancel_appointment(appointment_id)
    except AppointmentNotFound:
        return _not_found()

    logger.info("Appointment %s cancelled by %s", appointment.id, current_user.id)
    return jsonify({
        'success': True,
        'data': appointment_service.serialize_one(appointment)
    }), 200
