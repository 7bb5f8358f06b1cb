import enum

from flask_login import UserMixin

from app.extensions import db, bcrypt
from .base import TimestampMixin, new_id


class Role(str, enum.Enum):
    """Portal roles. Every authorization gate branches on these two values only."""
    RECEPTION = 'reception'
    DOCTOR = 'doctor'


class User(db.Model, TimestampMixin, UserMixin):
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255))
    password_hash = db.Column(db.String(255), nullable=True)  # null = cannot sign in

    role = db.Column(
        db.Enum(Role, name='user_role', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.RECEPTION,
        index=True,
    )

    # Outlook calendar OAuth tokens
    microsoft_access_token = db.Column(db.Text, nullable=True)
    microsoft_refresh_token = db.Column(db.Text, nullable=True)
    microsoft_token_expires_at = db.Column(db.DateTime, nullable=True)

    @staticmethod
    def normalize_email(email):
        return (email or '').strip().lower()

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if provided password matches hash"""
        if not self.password_hash:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def is_reception(self):
        return self.role is Role.RECEPTION

    def is_doctor(self):
        return self.role is Role.DOCTOR

    @property
    def has_outlook(self):
        return bool(self.microsoft_refresh_token)

    def clear_outlook_tokens(self):
        self.microsoft_access_token = None
        self.microsoft_refresh_token = None
        self.microsoft_token_expires_at = None

    def summary(self):
        """Doctor summary embedded in appointment responses."""
        return {'id': self.id, 'name': self.name, 'email': self.email}

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role.value,
            'outlookConnected': self.has_outlook,
        }

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"
