"""
Email Service for appointment notifications
"""
import smtplib
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from flask import current_app
from markupsafe import escape

logger = logging.getLogger(__name__)


def is_email_configured():
    return bool(current_app.config.get('MAIL_USERNAME') and current_app.config.get('MAIL_PASSWORD'))


def format_appointment_date(moment):
    """e.g. 'Tuesday, October 20, 2026 at 9:00 AM UTC'"""
    return f"{moment:%A, %B} {moment.day}, {moment:%Y} at {moment.strftime('%I:%M %p').lstrip('0')} UTC"


def send_email(to_email, subject, body_text, body_html=None):
    """
    Generic email sending function

    Args:
        to_email: Recipient email
        subject: Email subject
        body_text: Plain text body
        body_html: HTML body (optional)

    Returns:
        bool: True if sent successfully
    """
    try:
        mail_server = current_app.config.get('MAIL_SERVER')
        mail_port = current_app.config.get('MAIL_PORT')
        mail_use_tls = current_app.config.get('MAIL_USE_TLS')
        mail_username = current_app.config.get('MAIL_USERNAME')
        mail_password = current_app.config.get('MAIL_PASSWORD')
        mail_sender = current_app.config.get('MAIL_DEFAULT_SENDER')

        if not mail_username or not mail_password:
            logger.warning("Email not configured")
            return False

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = mail_sender
        msg['To'] = to_email

        msg.attach(MIMEText(body_text, 'plain'))
        if body_html:
            msg.attach(MIMEText(body_html, 'html'))

        with smtplib.SMTP(mail_server, mail_port, timeout=30) as server:
            if mail_use_tls:
                server.starttls()
            server.login(mail_username, mail_password)
            server.sendmail(mail_sender, to_email, msg.as_string())

        logger.info(f"Email sent to {to_email}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def send_appointment_scheduled_email(doctor_email, doctor_name, patient_name, appointment_date,
                                     duration_minutes, exam_type, added_by,
                                     internal_notes=None, onedrive_link=None):
    """
    Tell the assigned doctor a new appointment was scheduled for them.

    Returns:
        bool: True if email sent successfully, False otherwise
    """
    date_str = format_appointment_date(appointment_date)
    subject = f"New appointment: {patient_name} – {exam_type} ({date_str})"

    text = f"""
Hi{f' {doctor_name}' if doctor_name else ''},

A new appointment has been scheduled and assigned to you.

Patient: {patient_name}
Date & time: {date_str}
Duration: {duration_minutes} minutes
Exam type: {exam_type}
Added by: {added_by}
{f'Notes: {internal_notes}' if internal_notes else ''}
{f'OneDrive link: {onedrive_link}' if onedrive_link else ''}

Sign in to the portal to view your calendar and appointment details.
    """

    html = f"""
<p>Hi{f' {escape(doctor_name)}' if doctor_name else ''},</p>
<p>A new appointment has been scheduled and assigned to you.</p>
<ul>
    <li><strong>Patient:</strong> {escape(patient_name)}</li>
    <li><strong>Date &amp; time:</strong> {escape(date_str)}</li>
    <li><strong>Duration:</strong> {duration_minutes} minutes</li>
    <li><strong>Exam type:</strong> {escape(exam_type)}</li>
    <li><strong>Added by:</strong> {escape(added_by)}</li>
</ul>
{f'<p><strong>Notes:</strong> {escape(internal_notes)}</p>' if internal_notes else ''}
{f'<p><strong>OneDrive link:</strong> <a href="{escape(onedrive_link)}">{escape(onedrive_link)}</a></p>' if onedrive_link else ''}
<p>Sign in to the portal to view your calendar and appointment details.</p>
    """

    return send_email(doctor_email, subject, text, html)


def send_patient_confirmation_email(patient_email, patient_name, appointment_date, duration_minutes,
                                    exam_type, doctor_name=None, onedrive_link=None):
    """
    Confirm a newly scheduled appointment to the patient.

    Returns:
        bool: True if email sent successfully, False otherwise
    """
    practice = current_app.config.get('PRACTICE_NAME')
    date_str = format_appointment_date(appointment_date)
    subject = f"Appointment confirmed: {exam_type} – {date_str}"

    text = f"""
Hi {patient_name},

Your appointment at {practice} has been confirmed.

Date & time: {date_str}
Duration: {duration_minutes} minutes
Exam type: {exam_type}
{f'Doctor: {doctor_name}' if doctor_name else ''}
{f'Records link: {onedrive_link}' if onedrive_link else ''}

If you need to reschedule or have questions, please contact us.
    """

    html = f"""
<p>Hi {escape(patient_name)},</p>
<p>Your appointment at {escape(practice)} has been confirmed.</p>
<ul>
    <li><strong>Date &amp; time:</strong> {escape(date_str)}</li>
    <li><strong>Duration:</strong> {duration_minutes} minutes</li>
    <li><strong>Exam type:</strong> {escape(exam_type)}</li>
    {f'<li><strong>Doctor:</strong> {escape(doctor_name)}</li>' if doctor_name else ''}
</ul>
{f'<p><strong>Records link:</strong> <a href="{escape(onedrive_link)}">{escape(onedrive_link)}</a></p>' if onedrive_link else ''}
<p>If you need to reschedule or have questions, please contact us.</p>
    """

    return send_email(patient_email, subject, text, html)
