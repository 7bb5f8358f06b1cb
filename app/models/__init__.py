from .user import User, Role
from .appointment import Appointment, AppointmentStatus

__all__ = ["User", "Role", "Appointment", "AppointmentStatus"]
