from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from app.models import User, Role
from app.services.appointment_service import auto_complete_past_due, list_appointments
from app.utils.decorators import rate_limit

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/api/dashboard')


@dashboard_bp.route('', methods=['GET'])
@login_required
@rate_limit()
def dashboard():
    """
    Everything the dashboard page needs in one call.
    Reception also gets the doctor list for the assignment picker.
    """
    auto_complete_past_due()

    data = {
        'user': current_user.to_dict(),
        'appointments': list_appointments(current_user),
    }
    if current_user.is_reception():
        doctors = User.query.filter_by(role=Role.DOCTOR).order_by(User.name.asc()).all()
        data['doctors'] = [d.summary() for d in doctors]

    return jsonify({
        'success': True,
        'data': data
    }), 200
