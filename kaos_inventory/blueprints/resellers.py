from flask import Blueprint, jsonify, current_app

from kaos_inventory.database import get_session
from kaos_inventory.schemas import ResellerCreate, ResellerUpdate
from kaos_inventory.services import reseller_service
from kaos_inventory.utils.request_helpers import parse_body

resellers_bp = Blueprint('resellers', __name__, url_prefix='/api/resellers')


@resellers_bp.route('', methods=['GET'])
def list_resellers():
    session = get_session()
    return jsonify([r.to_dict() for r in reseller_service.list_resellers(session)])


@resellers_bp.route('/<int:reseller_id>', methods=['GET'])
def get_reseller(reseller_id):
    session = get_session()
    return jsonify(reseller_service.get_reseller(session, reseller_id).to_dict())


@resellers_bp.route('', methods=['POST'])
def create_reseller():
    session = get_session()
    reseller = reseller_service.create_reseller(session, parse_body(ResellerCreate))
    current_app.logger.info(f"Reseller {reseller.id} created: {reseller.name}")
    return jsonify(reseller.to_dict()), 201


@resellers_bp.route('/<int:reseller_id>', methods=['PATCH'])
def update_reseller(reseller_id):
    """Update phone/address only."""
    session = get_session()
    reseller = reseller_service.update_reseller(session, reseller_id, parse_body(ResellerUpdate))
    return jsonify(reseller.to_dict())
