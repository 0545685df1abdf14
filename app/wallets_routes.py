from flask import Blueprint, request, jsonify

from .errors import ValidationError
from .services import get_services

wallets_bp = Blueprint('wallets_bp', __name__, url_prefix='/api/wallets')


@wallets_bp.route('', methods=['POST'])
def create_wallet():
    """Provisions the custodial wallet for {userId} ahead of a first purchase."""
    body = request.get_json(silent=True) or {}
    user_id = body.get('userId')
    if not user_id:
        raise ValidationError("Missing userId")

    address, created = get_services().wallets.create_wallet(str(user_id))
    return jsonify({
        'success': True,
        'walletAddress': address,
        'created': created,
        'message': 'Custodial wallet created successfully' if created else 'Wallet already exists'
    })
