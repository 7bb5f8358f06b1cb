#!/usr/bin/env python3
"""
Celery Worker Entry Point
Run with: celery -A celery_worker.celery worker --loglevel=info
Or: python celery_worker.py

The past-due sweep can also be scheduled with celery beat:
    celery -A celery_worker.celery beat
"""
from app import create_app
from app.extensions import celery

# Create Flask app to initialize Celery
app = create_app()

# Import tasks so Celery can discover them
from tasks import notification_tasks, sync_tasks  # noqa: E402,F401

celery.conf.beat_schedule = {
    'auto-complete-appointments': {
        'task': 'tasks.auto_complete_appointments',
        'schedule': 300.0,  # every 5 minutes
    },
}

if __name__ == '__main__':
    # For development: run worker directly
    celery.worker_main([
        'worker',
        '--loglevel=info',
        '--concurrency=4'
    ])
