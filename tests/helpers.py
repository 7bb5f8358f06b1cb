from datetime import timedelta

from app.extensions import db
from app.models import User, Appointment, AppointmentStatus
from app.models.base import utcnow

PASSWORD = 'password123'


def create_user(app, email, role, name=None, password=PASSWORD):
    with app.app_context():
        user = User(email=email, name=name or email.split('@')[0].title(), role=role)
        if password:
            user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.id


def create_appointment(app, **fields):
    values = {
        'patient_name': 'Jane Patient',
        'added_by': 'Front Desk',
        'appointment_date': utcnow() + timedelta(days=1),
        'duration_minutes': 60,
        'exam_type': 'Independent Medical Exam',
        'status': AppointmentStatus.SCHEDULED,
    }
    values.update(fields)
    with app.app_context():
        appointment = Appointment(**values)
        db.session.add(appointment)
        db.session.commit()
        return appointment.id


def load(app, model, ident):
    """Fresh copy of a row, detached from any request's session."""
    with app.app_context():
        obj = db.session.get(model, ident)
        if obj is not None:
            db.session.expunge(obj)
        return obj


def login(client, email, password=PASSWORD):
    return client.post('/api/auth/login', json={'email': email, 'password': password})


def iso(moment):
    return moment.replace(microsecond=0).isoformat() + 'Z'


def future_iso(days=1):
    return iso(utcnow() + timedelta(days=days))


def appointment_body(**overrides):
    body = {
        'patientName': 'Jane Patient',
        'addedBy': 'Front Desk',
        'appointmentDate': future_iso(),
        'durationMinutes': 60,
        'examType': 'Independent Medical Exam',
    }
    body.update(overrides)
    return body
