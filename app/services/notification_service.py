"""
Notification dispatch for new appointments.

Notifications are queued as Celery tasks after the appointment is committed
and never hold up the response. Publishing errors, and tasks that report
failure when their result is available synchronously (eager mode), are
handed to a failure observer instead of being raised.
"""
import logging

from celery.result import EagerResult
from flask import current_app

from app.extensions import db
from app.models import User

logger = logging.getLogger(__name__)


def log_failure(task_name, args, error):
    logger.warning("Notification %s%s failed: %s", task_name, tuple(args), error or 'reported failure')


class NotificationDispatcher:
    def __init__(self, on_failure=None):
        self.on_failure = on_failure or log_failure

    def dispatch(self, task, *args):
        try:
            result = task.apply_async(args=args)
        except Exception as e:
            self.on_failure(task.name, args, e)
            return None

        if isinstance(result, EagerResult):
            if result.failed():
                self.on_failure(task.name, args, result.result)
            elif result.result is False:
                self.on_failure(task.name, args, None)
        return result


def init_notifications(app, dispatcher=None):
    app.extensions['notification_dispatcher'] = dispatcher or NotificationDispatcher()


def get_dispatcher():
    return current_app.extensions['notification_dispatcher']


def calendar_subject(appointment):
    return f"{appointment.patient_name} – {appointment.exam_type}"


def calendar_body(appointment):
    lines = [
        appointment.internal_notes,
        f"Added by: {appointment.added_by}" if appointment.added_by else None,
        f"OneDrive: {appointment.onedrive_link}" if appointment.onedrive_link else None,
    ]
    return "\n".join(line for line in lines if line)


def notify_appointment_created(appointment, creator, dispatcher=None):
    """Queue every notification a newly created appointment triggers."""
    from tasks import notification_tasks

    dispatcher = dispatcher or get_dispatcher()

    doctor = None
    if appointment.assigned_doctor_id:
        doctor = db.session.get(User, appointment.assigned_doctor_id)

    dispatcher.dispatch(notification_tasks.create_outlook_event, creator.id, appointment.id)
    if doctor and doctor.id != creator.id:
        dispatcher.dispatch(notification_tasks.create_outlook_event, doctor.id, appointment.id)

    if doctor and doctor.email:
        dispatcher.dispatch(notification_tasks.send_doctor_appointment_email, appointment.id)

    if appointment.patient_email:
        dispatcher.dispatch(notification_tasks.send_patient_confirmation_email, appointment.id)

    if appointment.patient_phone:
        dispatcher.dispatch(notification_tasks.send_patient_confirmation_sms, appointment.id)
