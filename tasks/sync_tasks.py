"""
Celery tasks for appointment maintenance
"""
import logging
from datetime import datetime
from app.extensions import celery
from app.services.appointment_service import auto_complete_past_due

logger = logging.getLogger(__name__)


@celery.task(name='tasks.auto_complete_appointments')
def auto_complete_appointments():
    """
    Mark past-due scheduled appointments as completed.
    Meant for a Celery beat schedule; requests also sweep on read.

    Returns:
        dict: Sweep results
    """
    completed_count = auto_complete_past_due()
    return {
        'success': True,
        'completed_count': completed_count,
        'timestamp': datetime.utcnow().isoformat()
    }
