import enum
from datetime import timedelta

from app.extensions import db
from .base import TimestampMixin, new_id, to_iso


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = 'scheduled'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class Appointment(db.Model, TimestampMixin):
    __tablename__ = 'appointments'

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    patient_name = db.Column(db.String(255), nullable=False)
    added_by = db.Column(db.String(255), nullable=False)
    patient_phone = db.Column(db.String(40))
    patient_email = db.Column(db.String(255))

    appointment_date = db.Column(db.DateTime, nullable=False, index=True)  # UTC
    duration_minutes = db.Column(db.Integer, nullable=False, default=60)
    exam_type = db.Column(db.String(255), nullable=False)

    status = db.Column(
        db.Enum(AppointmentStatus, name='appointment_status', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
        index=True,
    )

    onedrive_link = db.Column(db.Text)
    internal_notes = db.Column(db.Text)

    # Weak reference to users.id: no FK, so removing a doctor only unassigns
    assigned_doctor_id = db.Column(db.String(36), nullable=True, index=True)

    @property
    def ends_at(self):
        return self.appointment_date + timedelta(minutes=self.duration_minutes)

    def to_dict(self, doctor=None):
        """API representation. `doctor` is the assigned doctor's summary dict, if any."""
        return {
            'id': self.id,
            'patientName': self.patient_name,
            'addedBy': self.added_by,
            'patientPhone': self.patient_phone,
            'patientEmail': self.patient_email,
            'appointmentDate': to_iso(self.appointment_date),
            'durationMinutes': self.duration_minutes,
            'examType': self.exam_type,
            'status': self.status.value,
            'oneDriveLink': self.onedrive_link,
            'internalNotes': self.internal_notes,
            'assignedDoctorId': self.assigned_doctor_id,
            'assignedDoctor': doctor,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Appointment {self.patient_name} - {self.exam_type} on {self.appointment_date}>"
