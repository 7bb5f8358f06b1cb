#!/usr/bin/env python3
"""
Initialize the portal database with demo users and sample appointments.
Run with: python3 init_admin.py

Environment:
    PORTAL_SEED_RECEPTION_EMAIL  (default reception@decoftexas.com)
    PORTAL_SEED_DOCTOR_EMAIL     (default doctor@decoftexas.com)
    PORTAL_SEED_PASSWORD         (default changeme)
"""
import os

from app import create_app
from app.extensions import db
from app.seeds import seed_portal, DEFAULT_SEED_PASSWORD


def create_users():
    """Create default portal users"""
    app = create_app()

    password = os.getenv('PORTAL_SEED_PASSWORD', DEFAULT_SEED_PASSWORD)
    reception_email = os.getenv('PORTAL_SEED_RECEPTION_EMAIL', 'reception@decoftexas.com')
    doctor_email = os.getenv('PORTAL_SEED_DOCTOR_EMAIL', 'doctor@decoftexas.com')

    with app.app_context():
        print("=" * 60)
        print("Initializing Portal Users")
        print("=" * 60)
        print()

        db.create_all()
        reception, doctor, appointments = seed_portal(reception_email, doctor_email, password)

        print(f"  ✓ Reception user: {reception.email}")
        print(f"  ✓ Doctor user: {doctor.email}")
        if appointments:
            print(f"  ✓ Created {appointments} sample appointments")

        print()
        print("=" * 60)
        if password == DEFAULT_SEED_PASSWORD:
            print("⚠️  Password is 'changeme'. Change it after first login!")
        else:
            print("Sign in with PORTAL_SEED_PASSWORD")
        print("=" * 60)


if __name__ == '__main__':
    create_users()
