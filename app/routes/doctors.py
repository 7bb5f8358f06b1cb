"""
Doctor account management (reception only)
"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError
from app.extensions import db
from app.models import User, Role
from app.services.appointment_service import unassign_doctor
from app.utils.decorators import require_role, rate_limit, json_body
from app.utils.validators import validate_doctor, joined_errors
import logging

logger = logging.getLogger(__name__)

doctors_bp = Blueprint('doctors', __name__, url_prefix='/api/doctors')

DUPLICATE_EMAIL_MESSAGE = 'A user with this email already exists.'


def _get_doctor(doctor_id):
    user = db.session.get(User, doctor_id)
    if user is None or not user.is_doctor():
        return None
    return user


def _email_taken(email, exclude_id=None):
    query = User.query.filter(User.email == email)
    if exclude_id:
        query = query.filter(User.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def _conflict():
    return jsonify({
        'success': False,
        'error': DUPLICATE_EMAIL_MESSAGE
    }), 409


def _doctor_not_found():
    return jsonify({
        'success': False,
        'error': 'Doctor not found'
    }), 404


@doctors_bp.route('', methods=['GET'])
@login_required
@rate_limit()
@require_role(Role.RECEPTION)
def list_doctors():
    """List doctors as [{id, name, email}] ordered by name"""
    doctors = User.query.filter_by(role=Role.DOCTOR).order_by(User.name.asc()).all()
    return jsonify({
        'success': True,
        'data': [d.summary() for d in doctors]
    }), 200


@doctors_bp.route('', methods=['POST'])
@login_required
@rate_limit()
@require_role(Role.RECEPTION)
def create_doctor():
    data = json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Invalid JSON'}), 400

    payload, errors = validate_doctor(data)
    if errors:
        return jsonify({
            'success': False,
            'error': joined_errors(errors)
        }), 400

    if _email_taken(payload['email']):
        return _conflict()

    doctor = User(email=payload['email'], name=payload['name'], role=Role.DOCTOR)
    doctor.set_password(payload['password'])
    db.session.add(doctor)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same email
        db.session.rollback()
        return _conflict()

    logger.info("Doctor %s created by %s", doctor.id, current_user.id)
    return jsonify({
        'success': True,
        'data': doctor.summary()
    }), 201


@doctors_bp.route('/<doctor_id>', methods=['PATCH'])
@login_required
@rate_limit()
@require_role(Role.RECEPTION)
def update_doctor(doctor_id):
    """Update name, email and/or password. An empty password is ignored."""
    data = json_body()
    if data is None:
        return jsonify({'success': False, 'error': 'Invalid JSON'}), 400

    payload, errors = validate_doctor(data, partial=True)
    if errors:
        return jsonify({
            'success': False,
            'error': joined_errors(errors)
        }), 400

    doctor = _get_doctor(doctor_id)
    if doctor is None:
        return _doctor_not_found()

    if 'email' in payload and _email_taken(payload['email'], exclude_id=doctor.id):
        return _conflict()

    if 'name' in payload:
        doctor.name = payload['name']
    if 'email' in payload:
        doctor.email = payload['email']
    if 'password' in payload:
        doctor.set_password(payload['password'])

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return _conflict()

    return jsonify({
        'success': True,
        'data': doctor.summary()
    }), 200


@doctors_bp.route('/<doctor_id>', methods=['DELETE'])
@login_required
@rate_limit()
@require_role(Role.RECEPTION)
def delete_doctor(doctor_id):
    """Delete a doctor account. Their appointments are kept and unassigned."""
    doctor = _get_doctor(doctor_id)
    if doctor is None:
        return _doctor_not_found()

    unassigned = unassign_doctor(doctor.id)
    db.session.delete(doctor)
    db.session.commit()

    logger.info("Doctor %s deleted by %s; %d appointment(s) unassigned", doctor_id, current_user.id, unassigned)
    return jsonify({
        'success': True,
        'data': {'id': doctor_id, 'unassignedAppointments': unassigned}
    }), 200
