"""
Seed data for a fresh portal: demo users and sample appointments.
"""
import logging
from datetime import timedelta

from app.extensions import db
from app.models import User, Role, Appointment, AppointmentStatus
from app.models.base import utcnow

logger = logging.getLogger(__name__)

DEFAULT_SEED_PASSWORD = 'changeme'

# (patient, day offset from today, duration, exam type, status, extra fields)
SAMPLE_APPOINTMENTS = [
    ("Sample Patient One", -1, 60, "IME - Workers' Comp", AppointmentStatus.COMPLETED,
     {'internal_notes': 'Demo appointment (past).'}),
    ("Sample Patient Two", 0, 45, "MMI / IR Evaluation", AppointmentStatus.SCHEDULED,
     {'onedrive_link': 'https://onedrive.live.com', 'internal_notes': 'Demo appointment (today).'}),
    ("Sample Patient Three", 1, 90, "Independent Medical Exam", AppointmentStatus.SCHEDULED,
     {'internal_notes': 'Demo appointment (future).'}),
    ("Sample Patient Four", 7, 60, "Second Opinion", AppointmentStatus.SCHEDULED, {}),
    ("Sample Patient Five", -2, 60, "IME - Workers' Comp", AppointmentStatus.CANCELLED,
     {'internal_notes': 'Demo cancelled appointment.'}),
]


def upsert_user(email, name, role, password):
    """Create the user if the email is not taken yet; existing users are left alone."""
    email = User.normalize_email(email)
    user = User.query.filter_by(email=email).first()
    if user:
        return user, False
    user = User(email=email, name=name, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user, True


def seed_sample_appointments(doctor, added_by='Reception'):
    """Create demo appointments (09:00 UTC on their day) if the table is empty."""
    if Appointment.query.count() > 0:
        return 0

    today = utcnow().replace(hour=9, minute=0, second=0, microsecond=0)
    for patient_name, day_offset, duration, exam_type, status, extra in SAMPLE_APPOINTMENTS:
        db.session.add(Appointment(
            patient_name=patient_name,
            added_by=added_by,
            appointment_date=today + timedelta(days=day_offset),
            duration_minutes=duration,
            exam_type=exam_type,
            status=status,
            assigned_doctor_id=doctor.id,
            **extra
        ))
    db.session.commit()
    logger.info("Seeded %d sample appointments", len(SAMPLE_APPOINTMENTS))
    return len(SAMPLE_APPOINTMENTS)


def seed_portal(reception_email, doctor_email, password=DEFAULT_SEED_PASSWORD):
    reception, _ = upsert_user(reception_email, 'Reception', Role.RECEPTION, password)
    doctor, _ = upsert_user(doctor_email, 'Doctor', Role.DOCTOR, password)
    appointments = seed_sample_appointments(doctor, added_by=reception.name)
    return reception, doctor, appointments
