"""
Appointment Service
Repository operations, role-filtered listing and the past-due sweeper
"""
import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models import Appointment, AppointmentStatus, Role, User
from app.models.base import utcnow
from app.utils.validators import PAST_DATE_MESSAGE, is_past

logger = logging.getLogger(__name__)


class AppointmentNotFound(LookupError):
    pass


class PastAppointmentDate(ValueError):
    def __init__(self, message=PAST_DATE_MESSAGE):
        super().__init__(message)


def doctor_summaries(doctor_ids: Iterable[Optional[str]]) -> Dict[str, dict]:
    """Look up {id, name, email} for the given user ids in one query."""
    ids = {i for i in doctor_ids if i}
    if not ids:
        return {}
    users = User.query.filter(User.id.in_(ids)).all()
    return {u.id: u.summary() for u in users}


def serialize(appointments: List[Appointment]) -> List[dict]:
    doctors = doctor_summaries(a.assigned_doctor_id for a in appointments)
    return [a.to_dict(doctors.get(a.assigned_doctor_id)) for a in appointments]


def serialize_one(appointment: Appointment) -> dict:
    return serialize([appointment])[0]


def visible_appointments_query(user: User):
    """Appointments the user may see, ordered by date ascending."""
    query = Appointment.query
    if user.role is Role.DOCTOR:
        query = query.filter(
            Appointment.assigned_doctor_id == user.id,
            Appointment.status != AppointmentStatus.CANCELLED,
        )
    elif user.role is Role.RECEPTION:
        pass
    else:
        raise ValueError(f"Unhandled role: {user.role!r}")
    return query.order_by(Appointment.appointment_date.asc())


def list_appointments(user: User) -> List[dict]:
    return serialize(visible_appointments_query(user).all())


def get_appointment(appointment_id: str) -> Appointment:
    appointment = db.session.get(Appointment, appointment_id)
    if appointment is None:
        raise AppointmentNotFound(appointment_id)
    return appointment


def can_view(user: User, appointment: Appointment) -> bool:
    if user.role is Role.RECEPTION:
        return True
    if user.role is Role.DOCTOR:
        return appointment.assigned_doctor_id == user.id
    raise ValueError(f"Unhandled role: {user.role!r}")


def create_appointment(payload: dict, now=None) -> Appointment:
    """
    Insert a new scheduled appointment.

    Args:
        payload: Output of validate_appointment_create()
        now: Current instant (naive UTC), defaults to the clock

    Raises:
        PastAppointmentDate: appointment_date is before now at insert time
    """
    if is_past(payload['appointment_date'], now):
        raise PastAppointmentDate()

    appointment = Appointment(status=AppointmentStatus.SCHEDULED, **payload)
    db.session.add(appointment)
    db.session.commit()
    logger.info("Appointment %s created for %s", appointment.id, appointment.appointment_date)
    return appointment


def update_appointment(appointment_id: str, payload: dict, now=None) -> Appointment:
    """Apply the fields present in payload; everything else is left as is."""
    appointment = get_appointment(appointment_id)

    if 'appointment_date' in payload and is_past(payload['appointment_date'], now):
        raise PastAppointmentDate()

    for attr, value in payload.items():
        setattr(appointment, attr, value)
    db.session.commit()
    return appointment


def cancel_appointment(appointment_id: str) -> Appointment:
    appointment = get_appointment(appointment_id)
    appointment.status = AppointmentStatus.CANCELLED
    db.session.commit()
    return appointment


def unassign_doctor(doctor_id: str) -> int:
    """Detach a doctor from all of their appointments. Does not commit."""
    return Appointment.query.filter(
        Appointment.assigned_doctor_id == doctor_id
    ).update({Appointment.assigned_doctor_id: None}, synchronize_session=False)


def auto_complete_past_due(now=None) -> int:
    """
    Mark scheduled appointments whose end time has passed as completed.

    Safe to run concurrently and repeatedly. Failures are logged and the
    sweep is skipped; callers never see an error.

    Returns:
        int: Number of appointments completed by this run
    """
    now = now or utcnow()
    try:
        scheduled = Appointment.query.filter(
            Appointment.status == AppointmentStatus.SCHEDULED,
            Appointment.appointment_date < now,
        ).all()

        completed = 0
        for appointment in scheduled:
            if appointment.appointment_date + timedelta(minutes=appointment.duration_minutes) < now:
                appointment.status = AppointmentStatus.COMPLETED
                completed += 1

        if completed:
            db.session.commit()
            logger.info("Auto-completed %d past-due appointment(s)", completed)
        return completed

    except SQLAlchemyError as e:
        logger.warning("Past-due sweep skipped: %s", e)
        db.session.rollback()
        return 0
