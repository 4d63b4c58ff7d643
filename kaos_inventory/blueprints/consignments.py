"""Consignment endpoints: creation, payments, returns and the admin edit."""
from flask import Blueprint, jsonify, current_app

from kaos_inventory.database import get_session
from kaos_inventory.schemas import ConsignmentCreate, PaymentRequest, ReturnRequest, ConsignmentEdit
from kaos_inventory.services import consignment_service
from kaos_inventory.utils.request_helpers import parse_body

consignments_bp = Blueprint('consignments', __name__, url_prefix='/api/consignments')


def _detail(session, consignment):
    return jsonify(consignment_service.consignment_detail(session, consignment))


@consignments_bp.route('', methods=['GET'])
def list_consignments():
    session = get_session()
    consignments = consignment_service.list_consignments(session)
    return jsonify(consignment_service.consignment_details(session, consignments))


@consignments_bp.route('/active', methods=['GET'])
def list_active():
    session = get_session()
    consignments = consignment_service.list_active_consignments(session)
    return jsonify(consignment_service.consignment_details(session, consignments))


@consignments_bp.route('/<int:consignment_id>', methods=['GET'])
def get_consignment(consignment_id):
    session = get_session()
    return _detail(session, consignment_service.get_consignment(session, consignment_id))


@consignments_bp.route('', methods=['POST'])
def create_consignment():
    session = get_session()
    consignment = consignment_service.create_consignment(session, parse_body(ConsignmentCreate))
    current_app.logger.info(
        f"Consignment {consignment.consignment_code} created "
        f"(reseller={consignment.reseller_id}, items={consignment.total_items})"
    )
    return _detail(session, consignment), 201


@consignments_bp.route('/<int:consignment_id>/payment', methods=['POST'])
def payment(consignment_id):
    session = get_session()
    data = parse_body(PaymentRequest)
    consignment = consignment_service.process_payment(session, consignment_id, data.amount)
    current_app.logger.info(
        f"Payment {data.amount} on {consignment.consignment_code} -> {consignment.status.value}"
    )
    return _detail(session, consignment)


@consignments_bp.route('/<int:consignment_id>/return', methods=['POST'])
def process_return(consignment_id):
    session = get_session()
    data = parse_body(ReturnRequest)
    consignment = consignment_service.process_return(session, consignment_id, data.items)
    current_app.logger.info(
        f"Return on {consignment.consignment_code} -> {consignment.status.value}"
    )
    return _detail(session, consignment)


@consignments_bp.route('/<int:consignment_id>/edit', methods=['PUT'])
def edit_consignment(consignment_id):
    """Administrative correction; bypasses the payment/return rules."""
    session = get_session()
    consignment = consignment_service.edit_consignment(session, consignment_id, parse_body(ConsignmentEdit))
    return _detail(session, consignment)
