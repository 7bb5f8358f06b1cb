from .appointment_service import (
    AppointmentNotFound,
    PastAppointmentDate,
    list_appointments,
    get_appointment,
    create_appointment,
    update_appointment,
    cancel_appointment,
    auto_complete_past_due,
)

from .notification_service import NotificationDispatcher, notify_appointment_created

__all__ = [
    # Appointment Services
    "AppointmentNotFound",
    "PastAppointmentDate",
    "list_appointments",
    "get_appointment",
    "create_appointment",
    "update_appointment",
    "cancel_appointment",
    "auto_complete_past_due",
    # Notification Services
    "NotificationDispatcher",
    "notify_appointment_created",
]
