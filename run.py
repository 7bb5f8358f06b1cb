"""
Local development server for the exam portal API.
Production runs wsgi.py under gunicorn instead.
"""
import logging
import os

from app import create_app

logger = logging.getLogger('run')

app = create_app()

if __name__ == '__main__':
    host = os.getenv('FLASK_HOST', '127.0.0.1')
    port = int(os.getenv('FLASK_PORT', 5000))

    logger.info("Exam portal listening on http://%s:%s (debug=%s)", host, port, app.debug)
    app.run(host=host, port=port, debug=app.debug, threaded=True)
