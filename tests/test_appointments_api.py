from datetime import timedelta

from app.models import Appointment, AppointmentStatus, Role
from app.models.base import utcnow
from app.utils.rate_limit import InMemoryCounter, RateLimiter
from app.utils.validators import PAST_DATE_MESSAGE
from tests.helpers import appointment_body, create_appointment, create_user, iso, load


class TestCreate:
    def test_created_as_scheduled(self, reception_client, doctor):
        response = reception_client.post('/api/appointments', json=appointment_body(
            assignedDoctorId=doctor,
            oneDriveLink='https://onedrive.live.com/folder',
            patientPhone='(555) 123-4567',
        ))
        assert response.status_code == 201

        data = response.get_json()['data']
        assert data['status'] == 'scheduled'
        assert data['durationMinutes'] == 60
        assert data['oneDriveLink'] == 'https://onedrive.live.com/folder'
        assert data['assignedDoctor'] == {'id': doctor, 'name': 'Dr. Adams', 'email': 'doctor@example.com'}
        assert data['appointmentDate'].endswith('Z')

    def test_missing_patient_name(self, reception_client):
        body = appointment_body()
        del body['patientName']
        response = reception_client.post('/api/appointments', json=body)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Patient name is required.'

    def test_blank_added_by(self, reception_client):
        response = reception_client.post('/api/appointments', json=appointment_body(addedBy='  '))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Added by is required.'

    def test_javascript_link_rejected(self, app, reception_client):
        response = reception_client.post('/api/appointments', json=appointment_body(oneDriveLink='javascript:alert(1)'))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'URL must be https or http'
        with app.app_context():
            assert Appointment.query.count() == 0

    def test_past_date_rejected(self, reception_client):
        past = iso(utcnow() - timedelta(minutes=5))
        response = reception_client.post('/api/appointments', json=appointment_body(appointmentDate=past))
        assert response.status_code == 400
        assert response.get_json()['error'] == PAST_DATE_MESSAGE

    def test_unknown_doctor_id_is_accepted(self, reception_client):
        response = reception_client.post('/api/appointments', json=appointment_body(assignedDoctorId='no-such-user'))
        assert response.status_code == 201
        assert response.get_json()['data']['assignedDoctor'] is None

    def test_doctor_cannot_create(self, doctor_client):
        response = doctor_client.post('/api/appointments', json=appointment_body())
        assert response.status_code == 403
        assert response.get_json()['error'] == 'Forbidden'

    def test_invalid_json(self, reception_client):
        response = reception_client.post('/api/appointments', data='{', content_type='application/json')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid JSON'


class TestList:
    def test_reception_sees_all_in_date_order(self, app, reception_client, doctor):
        later = create_appointment(app, appointment_date=utcnow() + timedelta(days=3))
        sooner = create_appointment(app, appointment_date=utcnow() + timedelta(days=1), assigned_doctor_id=doctor)
        cancelled = create_appointment(app, status=AppointmentStatus.CANCELLED)

        response = reception_client.get('/api/appointments')
        assert response.status_code == 200
        ids = [a['id'] for a in response.get_json()['data']]
        assert set(ids) == {later, sooner, cancelled}
        assert ids.index(sooner) < ids.index(later)

    def test_doctor_sees_only_own_non_cancelled(self, app, doctor_client, doctor):
        other = create_user(app, 'other@example.com', Role.DOCTOR)
        mine = create_appointment(app, assigned_doctor_id=doctor)
        create_appointment(app, assigned_doctor_id=doctor, status=AppointmentStatus.CANCELLED)
        create_appointment(app, assigned_doctor_id=other)
        create_appointment(app)

        response = doctor_client.get('/api/appointments')
        assert response.status_code == 200
        data = response.get_json()['data']
        assert [a['id'] for a in data] == [mine]
        assert all(a['assignedDoctorId'] == doctor and a['status'] != 'cancelled' for a in data)

    def test_thirty_first_request_is_rate_limited(self, reception_client):
        for _ in range(30):
            assert reception_client.get('/api/appointments').status_code == 200
        response = reception_client.get('/api/appointments')
        assert response.status_code == 429
        assert response.get_json()['error'] == 'Too many requests'
        assert 'Retry-After' in response.headers

    def test_rate_limit_window_elapses(self, app, reception_client):
        clock = {'now': 0.0}
        app.extensions['rate_limiters']['api'] = RateLimiter(
            InMemoryCounter(60, clock=lambda: clock['now']), limit=30, scope='api'
        )
        for _ in range(30):
            reception_client.get('/api/appointments')
        assert reception_client.get('/api/appointments').status_code == 429

        clock['now'] = 61.0
        assert reception_client.get('/api/appointments').status_code == 200


class TestSingle:
    def test_get(self, app, reception_client):
        appointment_id = create_appointment(app, patient_name='Sam Patient')
        response = reception_client.get(f'/api/appointments/{appointment_id}')
        assert response.status_code == 200
        assert response.get_json()['data']['patientName'] == 'Sam Patient'

    def test_not_found(self, reception_client):
        response = reception_client.get('/api/appointments/does-not-exist')
        assert response.status_code == 404

    def test_doctor_cannot_read_others(self, app, doctor_client):
        other = create_user(app, 'other@example.com', Role.DOCTOR)
        appointment_id = create_appointment(app, assigned_doctor_id=other)
        assert doctor_client.get(f'/api/appointments/{appointment_id}').status_code == 403

    def test_doctor_reads_own(self, app, doctor_client, doctor):
        appointment_id = create_appointment(app, assigned_doctor_id=doctor)
        assert doctor_client.get(f'/api/appointments/{appointment_id}').status_code == 200


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, app, reception_client):
        appointment_id = create_appointment(app, internal_notes='Bring X-rays', duration_minutes=90)
        response = reception_client.patch(f'/api/appointments/{appointment_id}', json={'examType': 'MMI / IR Evaluation'})
        assert response.status_code == 200

        appointment = load(app, Appointment, appointment_id)
        assert appointment.exam_type == 'MMI / IR Evaluation'
        assert appointment.internal_notes == 'Bring X-rays'
        assert appointment.duration_minutes == 90

    def test_any_status_transition_is_allowed(self, app, reception_client):
        appointment_id = create_appointment(app, status=AppointmentStatus.CANCELLED)
        response = reception_client.patch(f'/api/appointments/{appointment_id}', json={'status': 'scheduled'})
        assert response.status_code == 200
        assert load(app, Appointment, appointment_id).status is AppointmentStatus.SCHEDULED

    def test_field_errors(self, app, reception_client):
        appointment_id = create_appointment(app)
        response = reception_client.patch(f'/api/appointments/{appointment_id}', json={'status': 'archived'})
        assert response.status_code == 400
        error = response.get_json()['error']
        assert error['formErrors'] == []
        assert list(error['fieldErrors']) == ['status']

    def test_past_date_rejected(self, app, reception_client):
        appointment_id = create_appointment(app)
        past = iso(utcnow() - timedelta(minutes=5))
        response = reception_client.patch(f'/api/appointments/{appointment_id}', json={'appointmentDate': past})
        assert response.status_code == 400
        assert response.get_json()['error'] == {
            'formErrors': [],
            'fieldErrors': {'appointmentDate': [PAST_DATE_MESSAGE]},
        }
        assert load(app, Appointment, appointment_id).appointment_date > utcnow()

    def test_not_found(self, reception_client):
        response = reception_client.patch('/api/appointments/missing', json={'examType': 'MMI'})
        assert response.status_code == 404

    def test_doctor_cannot_update(self, app, doctor_client, doctor):
        appointment_id = create_appointment(app, assigned_doctor_id=doctor)
        response = doctor_client.patch(f'/api/appointments/{appointment_id}', json={'status': 'completed'})
        assert response.status_code == 403


class TestCancel:
    def test_delete_cancels(self, app, reception_client):
        appointment_id = create_appointment(app)
        response = reception_client.delete(f'/api/appointments/{appointment_id}')
        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'cancelled'
        assert load(app, Appointment, appointment_id).status is AppointmentStatus.CANCELLED

    def test_delete_unknown(self, reception_client):
        assert reception_client.delete('/api/appointments/missing').status_code == 404
