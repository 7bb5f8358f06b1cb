from datetime import datetime, timedelta

import pytest

from app.models import Appointment
from app.services.appointment_service import (
    PastAppointmentDate,
    create_appointment,
    update_appointment,
)
from app.utils.validators import PAST_DATE_MESSAGE
from tests.helpers import create_appointment as insert_appointment, load

DATE = datetime(2026, 10, 20, 9, 0, 0)


def payload(**overrides):
    values = {
        'patient_name': 'Jane Patient',
        'added_by': 'Front Desk',
        'appointment_date': DATE,
        'duration_minutes': 60,
        'exam_type': 'Independent Medical Exam',
    }
    values.update(overrides)
    return values


class TestDateRecheck:
    """Dates validated a moment ago can fall into the past before they are written."""

    def test_create_rejects_date_passed_since_validation(self, app):
        with app.app_context():
            with pytest.raises(PastAppointmentDate) as excinfo:
                create_appointment(payload(), now=DATE + timedelta(seconds=1))
            assert str(excinfo.value) == PAST_DATE_MESSAGE
            assert Appointment.query.count() == 0

    def test_create_accepts_date_equal_to_now(self, app):
        with app.app_context():
            appointment = create_appointment(payload(), now=DATE)
            assert appointment.appointment_date == DATE

    def test_update_rejects_date_passed_since_validation(self, app):
        appointment_id = insert_appointment(app, appointment_date=DATE + timedelta(days=1))
        with app.app_context():
            with pytest.raises(PastAppointmentDate):
                update_appointment(appointment_id, {'appointment_date': DATE}, now=DATE + timedelta(minutes=1))
        assert load(app, Appointment, appointment_id).appointment_date == DATE + timedelta(days=1)

    def test_update_without_date_skips_check(self, app):
        appointment_id = insert_appointment(app, appointment_date=DATE)
        with app.app_context():
            update_appointment(appointment_id, {'exam_type': 'MMI'}, now=DATE + timedelta(days=30))
        assert load(app, Appointment, appointment_id).exam_type == 'MMI'
