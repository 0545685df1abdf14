import hmac
from functools import wraps

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user

from .services.staff_service import StaffService

staff_bp = Blueprint('staff_bp', __name__, url_prefix='/api/staff')


def host_token_required(f):
    """
    Decorator for host-only routes. The caller must send
    `Authorization: Bearer <HOST_API_TOKEN>`; with no token configured the
    route is closed.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get('HOST_API_TOKEN')
        if not expected:
            return jsonify({'success': False, 'error': 'Staff creation over HTTP is disabled'}), 403

        scheme, _, supplied = request.headers.get('Authorization', '').partition(' ')
        if scheme.lower() != 'bearer' or not hmac.compare_digest(supplied.encode('utf-8'), expected.encode('utf-8')):
            current_app.logger.warning(f"Unauthorized staff creation attempt from {request.remote_addr}")
            return jsonify({'success': False, 'error': 'Unauthorized'}), 401
        return f(*args, **kwargs)
    return decorated_function


@staff_bp.route('', methods=['POST'])
@host_token_required
def create_staff():
    body = request.get_json(silent=True) or {}
    staff = StaffService.create_staff(body.get('eventId'), body.get('email'), body.get('password'))
    return jsonify({'success': True, 'staff': {'id': staff.id, 'email': staff.email}})


@staff_bp.route('/login', methods=['POST'])
def login():
    body = request.get_json(silent=True) or {}
    email = body.get('email', '')
    password = body.get('password', '')
    event_id = body.get('eventId')

    # Input validation
    if not email or not password or not event_id:
        return jsonify({'success': False, 'error': 'Missing credentials'}), 400
    if len(email) > 255 or len(password) > 128:
        return jsonify({'success': False, 'error': 'Input too long.'}), 400

    staff = StaffService.login(email, password, str(event_id))
    if staff is None:
        return jsonify({'success': False, 'error': 'Invalid credentials'})

    login_user(staff)
    return jsonify({'success': True, 'staff': staff.to_dict()})


@staff_bp.route('/logout', methods=['POST'])
def logout():
    logout_user()
    return jsonify({'success': True})
