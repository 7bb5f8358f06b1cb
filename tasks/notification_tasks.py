"""
Celery tasks for appointment notifications

Each task loads what it needs by id and returns True on delivery, False on
failure and None when there is nothing to do. Tasks are not retried.
"""
import logging
from app.extensions import celery, db
from app.models import Appointment, User
from app.services import email_service, outlook_service, sms_service
from app.services.notification_service import calendar_subject, calendar_body

logger = logging.getLogger(__name__)


def _load_appointment(appointment_id):
    appointment = db.session.get(Appointment, appointment_id)
    if appointment is None:
        logger.warning(f"Appointment {appointment_id} no longer exists; notification dropped")
    return appointment


@celery.task(name='tasks.create_outlook_event')
def create_outlook_event(user_id, appointment_id):
    """Add the appointment to a user's Outlook calendar, if they connected one."""
    try:
        user = db.session.get(User, user_id)
        if user is None or not user.has_outlook:
            return None
        appointment = _load_appointment(appointment_id)
        if appointment is None:
            return False

        event_id = outlook_service.create_event(
            user,
            subject=calendar_subject(appointment),
            start=appointment.appointment_date,
            end=appointment.ends_at,
            body=calendar_body(appointment) or None,
        )
        return event_id is not None

    except Exception as e:
        logger.error(f"Error creating Outlook event: {e}", exc_info=True)
        db.session.rollback()
        return False


@celery.task(name='tasks.send_doctor_appointment_email')
def send_doctor_appointment_email(appointment_id):
    try:
        appointment = _load_appointment(appointment_id)
        if appointment is None:
            return False
        doctor = db.session.get(User, appointment.assigned_doctor_id) if appointment.assigned_doctor_id else None
        if doctor is None or not doctor.email:
            return None

        return email_service.send_appointment_scheduled_email(
            doctor_email=doctor.email,
            doctor_name=doctor.name,
            patient_name=appointment.patient_name,
            appointment_date=appointment.appointment_date,
            duration_minutes=appointment.duration_minutes,
            exam_type=appointment.exam_type,
            added_by=appointment.added_by,
            internal_notes=appointment.internal_notes,
            onedrive_link=appointment.onedrive_link,
        )

    except Exception as e:
        logger.error(f"Error sending doctor appointment email: {e}", exc_info=True)
        return False


@celery.task(name='tasks.send_patient_confirmation_email')
def send_patient_confirmation_email(appointment_id):
    try:
        appointment = _load_appointment(appointment_id)
        if appointment is None:
            return False
        if not appointment.patient_email:
            return None

        doctor = db.session.get(User, appointment.assigned_doctor_id) if appointment.assigned_doctor_id else None
        return email_service.send_patient_confirmation_email(
            patient_email=appointment.patient_email,
            patient_name=appointment.patient_name,
            appointment_date=appointment.appointment_date,
            duration_minutes=appointment.duration_minutes,
            exam_type=appointment.exam_type,
            doctor_name=doctor.name if doctor else None,
            onedrive_link=appointment.onedrive_link,
        )

    except Exception as e:
        logger.error(f"Error sending patient confirmation email: {e}", exc_info=True)
        return False


@celery.task(name='tasks.send_patient_confirmation_sms')
def send_patient_confirmation_sms(appointment_id):
    try:
        appointment = _load_appointment(appointment_id)
        if appointment is None:
            return False
        if not appointment.patient_phone:
            return None

        return sms_service.send_appointment_confirmation_sms(
            to_phone=appointment.patient_phone,
            appointment_date=appointment.appointment_date,
            exam_type=appointment.exam_type,
        )

    except Exception as e:
        logger.error(f"Error sending patient confirmation SMS: {e}", exc_info=True)
        return False
