from .auth import auth_bp
from .microsoft import microsoft_bp
from .appointment import appointment_bp
from .dashboard import dashboard_bp
from .doctors import doctors_bp
from .settings import settings_bp
from .health import health_bp

__all__ = ['auth_bp', 'microsoft_bp', 'appointment_bp', 'dashboard_bp', 'doctors_bp', 'settings_bp', 'health_bp']
