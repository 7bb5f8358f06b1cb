"""
SMS Service (Twilio)
"""
import logging
from flask import current_app
from twilio.rest import Client as TwilioClient

from app.utils.phone import to_e164

logger = logging.getLogger(__name__)


def is_sms_configured():
    config = current_app.config
    return bool(config.get('TWILIO_ACCOUNT_SID') and config.get('TWILIO_AUTH_TOKEN')
                and config.get('TWILIO_PHONE_NUMBER'))


def send_appointment_confirmation_sms(to_phone, appointment_date, exam_type):
    """
    Text the patient a confirmation of their appointment.

    Returns:
        bool: False when Twilio is not configured or the send fails
    """
    if not is_sms_configured():
        logger.warning("SMS not configured. Skipping appointment confirmation.")
        return False

    config = current_app.config
    date_str = f"{appointment_date:%a, %b} {appointment_date.day}, {appointment_date.strftime('%I:%M %p').lstrip('0')} UTC"
    body = (
        f"Your appointment at {config['PRACTICE_NAME']} is confirmed: "
        f"{date_str} – {exam_type}. Reply with questions or call us."
    )

    try:
        client = TwilioClient(config['TWILIO_ACCOUNT_SID'], config['TWILIO_AUTH_TOKEN'])
        client.messages.create(
            body=body,
            from_=config['TWILIO_PHONE_NUMBER'],
            to=to_e164(to_phone),
        )
        logger.info("Confirmation SMS sent to %s", to_e164(to_phone))
        return True
    except Exception as e:
        logger.error(f"Failed to send SMS to {to_phone}: {e}")
        return False
