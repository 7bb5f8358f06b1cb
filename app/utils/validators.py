"""
Request validation for appointment, doctor and settings payloads.

Validators take the decoded JSON body and return ``(payload, errors)``:
``payload`` is keyed by model attribute names with normalized values, and
``errors`` maps the camelCase request field to a list of messages, in the
order the fields are checked.
"""
import re
from datetime import datetime, timezone
from urllib.parse import urlparse

from app.models import AppointmentStatus
from app.models.base import utcnow

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
ALLOWED_URL_SCHEMES = ('http', 'https')

MIN_DURATION_MINUTES = 5
MAX_DURATION_MINUTES = 480
DEFAULT_DURATION_MINUTES = 60
MIN_PASSWORD_LENGTH = 8

PAST_DATE_MESSAGE = 'Appointment date and time cannot be in the past.'


def parse_datetime(value):
    """
    Parse an ISO-8601 date-time string into a naive UTC datetime.

    Accepts a trailing "Z" or a UTC offset; a value without offset is taken
    as UTC. Returns None for anything that is not a date-time.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if 'T' not in text and ' ' not in text:
        return None
    if text[-1:] in ('Z', 'z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def is_past(moment, now=None):
    return moment < (now or utcnow())


def is_allowed_url(value):
    """True for absolute http(s) URLs only (rejects javascript:, data:, ...)."""
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_URL_SCHEMES and bool(parsed.netloc)


def is_valid_email(value):
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value.strip()))


def first_error(errors):
    for messages in errors.values():
        if messages:
            return messages[0]
    return 'Validation failed'


def joined_errors(errors):
    return ' '.join(m for messages in errors.values() for m in messages) or 'Validation failed'


def flatten_errors(errors):
    return {'formErrors': [], 'fieldErrors': errors}


def _add(errors, field, message):
    errors.setdefault(field, []).append(message)


def _required_text(data, field, attr, message, payload, errors, partial):
    if partial and field not in data:
        return
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        _add(errors, field, message)
        return
    payload[attr] = value.strip()


def _optional_text(data, field, attr, payload, errors):
    if field not in data:
        return
    value = data[field]
    if value is None:
        payload[attr] = None
    elif isinstance(value, str):
        payload[attr] = value.strip() or None
    else:
        _add(errors, field, 'Must be text.')


def _validate_appointment(data, now, partial):
    payload = {}
    errors = {}

    _required_text(data, 'patientName', 'patient_name', 'Patient name is required.', payload, errors, partial)
    _required_text(data, 'addedBy', 'added_by', 'Added by is required.', payload, errors, partial)

    _optional_text(data, 'patientPhone', 'patient_phone', payload, errors)
    _optional_text(data, 'patientEmail', 'patient_email', payload, errors)
    if payload.get('patient_email') and not is_valid_email(payload['patient_email']):
        payload.pop('patient_email')
        _add(errors, 'patientEmail', 'Invalid email')

    if not partial or 'appointmentDate' in data:
        raw = data.get('appointmentDate')
        appointment_date = parse_datetime(raw)
        if raw in (None, ''):
            _add(errors, 'appointmentDate', 'Appointment date is required.')
        elif appointment_date is None:
            _add(errors, 'appointmentDate', 'Appointment date must be a valid date and time.')
        elif is_past(appointment_date, now):
            _add(errors, 'appointmentDate', PAST_DATE_MESSAGE)
        else:
            payload['appointment_date'] = appointment_date

    if 'durationMinutes' in data or not partial:
        duration = data.get('durationMinutes')
        if duration is None and not partial:
            payload['duration_minutes'] = DEFAULT_DURATION_MINUTES
        elif (isinstance(duration, bool) or not isinstance(duration, (int, float))
                or (isinstance(duration, float) and not duration.is_integer())):
            _add(errors, 'durationMinutes', 'Duration must be a whole number of minutes.')
        elif not MIN_DURATION_MINUTES <= duration <= MAX_DURATION_MINUTES:
            _add(errors, 'durationMinutes',
                 f'Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes.')
        else:
            payload['duration_minutes'] = int(duration)

    _required_text(data, 'examType', 'exam_type', 'Exam type is required.', payload, errors, partial)

    if partial and 'status' in data:
        try:
            payload['status'] = AppointmentStatus(data['status'])
        except ValueError:
            allowed = ', '.join(s.value for s in AppointmentStatus)
            _add(errors, 'status', f'Invalid status. Valid values: {allowed}')

    _optional_text(data, 'oneDriveLink', 'onedrive_link', payload, errors)
    if payload.get('onedrive_link') and not is_allowed_url(payload['onedrive_link']):
        payload.pop('onedrive_link')
        _add(errors, 'oneDriveLink', 'URL must be https or http')

    _optional_text(data, 'internalNotes', 'internal_notes', payload, errors)
    _optional_text(data, 'assignedDoctorId', 'assigned_doctor_id', payload, errors)

    return payload, errors


def validate_appointment_create(data, now=None):
    """Validate a new appointment; unset optional fields default to None."""
    payload, errors = _validate_appointment(data, now, partial=False)
    for attr in ('patient_phone', 'patient_email', 'onedrive_link', 'internal_notes', 'assigned_doctor_id'):
        payload.setdefault(attr, None)
    return payload, errors


def validate_appointment_update(data, now=None):
    """Validate a partial update; only keys present in the body end up in the payload."""
    return _validate_appointment(data, now, partial=True)


def validate_doctor(data, partial=False):
    payload = {}
    errors = {}

    _required_text(data, 'name', 'name', 'Name is required.', payload, errors, partial)

    if not partial or 'email' in data:
        email = data.get('email')
        if not is_valid_email(email):
            _add(errors, 'email', 'Please enter a valid email.')
        else:
            payload['email'] = email.strip().lower()

    password = data.get('password')
    if partial and 'password' not in data:
        pass
    elif not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        _add(errors, 'password', f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
    else:
        payload['password'] = password

    return payload, errors


def validate_password_change(data):
    payload = {}
    errors = {}
    current = data.get('currentPassword')
    new = data.get('newPassword')
    if not isinstance(current, str) or not current:
        _add(errors, 'currentPassword', 'Current password is required')
    else:
        payload['current_password'] = current
    if not isinstance(new, str) or len(new) < MIN_PASSWORD_LENGTH:
        _add(errors, 'newPassword', f'New password must be at least {MIN_PASSWORD_LENGTH} characters')
    else:
        payload['new_password'] = new
    return payload, errors
