# gatepass/tickets_routes.py

from flask import Blueprint, request, jsonify, current_app
from flask_login import current_user

from . import db
from .models import Ticket
from .constants import MintMode
from .errors import TicketingError, NotFoundError, ValidationError
from .services import get_services
from .services.signing import Credential

tickets_bp = Blueprint('tickets_bp', __name__, url_prefix='/api/tickets')


@tickets_bp.route('/purchase', methods=['POST'])
def purchase():
    """Issues a ticket for {eventId, userId}."""
    body = request.get_json(silent=True) or {}
    event_id = body.get('eventId')
    user_id = body.get('userId')

    if not event_id or not user_id:
        raise ValidationError("Missing eventId or userId")

    services = get_services()
    ticket = services.mints.issue_ticket(str(event_id), str(user_id))

    response = {'success': True, 'ticket': ticket.to_dict()}
    if services.mints.mode is MintMode.SIMULATED:
        response['demo'] = True
    return jsonify(response)


@tickets_bp.route('/<int:ticket_id>', methods=['GET'])
def get_ticket(ticket_id):
    ticket = db.session.get(Ticket, ticket_id)
    if ticket is None:
        raise NotFoundError(f"Ticket {ticket_id} not found")
    return jsonify({'ticket': ticket.to_dict()})


@tickets_bp.route('/qr', methods=['POST'])
def qr_data():
    """Signed credential for a ticket, serialized as the QR payload string."""
    body = request.get_json(silent=True) or {}
    ticket_id = body.get('ticketId')
    if not ticket_id:
        raise ValidationError("Missing ticketId")

    try:
        ticket = db.session.get(Ticket, int(ticket_id))
    except (TypeError, ValueError):
        raise ValidationError("ticketId must be an integer")
    if ticket is None:
        raise NotFoundError(f"Ticket {ticket_id} not found")

    credential = get_services().signer.issue(ticket)
    return jsonify({'qrData': credential.to_qr_string()})


@tickets_bp.route('/redeem', methods=['POST'])
def redeem():
    """
    Gate scan. Business rejections come back as 200 with success=false;
    only malformed input and infrastructure failures change the status code.
    """
    body = request.get_json(silent=True) or {}
    qr_string = body.get('credentialString') or body.get('qrDataString')
    staff_event_id = body.get('staffEventId')
    if current_user.is_authenticated:
        # A staff session is bound to its event; the body may not widen it.
        if staff_event_id and str(staff_event_id) != str(current_user.event_id):
            current_app.logger.warning(
                f"Staff {current_user.id} (event {current_user.event_id}) tried to scan for event {staff_event_id}"
            )
            return jsonify({'success': False, 'message': 'Staff not authorized for this event'}), 403
        staff_event_id = current_user.event_id

    if not qr_string or not staff_event_id:
        return jsonify({'success': False, 'message': 'Invalid request'}), 400

    try:
        credential = Credential.from_qr_string(qr_string)
        outcome = get_services().redemptions.redeem(credential, str(staff_event_id))
    except TicketingError as e:
        if e.status_code >= 500:
            current_app.logger.error(f"Verification error: {e.message}")
        return jsonify({'success': False, 'message': e.message}), e.status_code

    return jsonify(outcome.to_dict())
