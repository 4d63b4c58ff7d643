from flask import Blueprint, jsonify, current_app

from kaos_inventory.database import get_session
from kaos_inventory.schemas import DirectSaleCreate, ConsignmentSaleCreate
from kaos_inventory.services import sales_service
from kaos_inventory.utils.request_helpers import parse_body

sales_bp = Blueprint('sales', __name__, url_prefix='/api/sales')


@sales_bp.route('', methods=['GET'])
def list_sales():
    session = get_session()
    return jsonify(sales_service.sale_details(session, sales_service.list_sales(session)))


@sales_bp.route('/<int:sale_id>', methods=['GET'])
def get_sale(sale_id):
    session = get_session()
    sale = sales_service.get_sale(session, sale_id)
    return jsonify(sales_service.sale_details(session, [sale])[0])


@sales_bp.route('/direct', methods=['POST'])
def create_direct_sale():
    session = get_session()
    sale = sales_service.create_direct_sale(session, parse_body(DirectSaleCreate))
    current_app.logger.info(f"Direct sale {sale.sale_code} recorded: {sale.amount}")
    return jsonify(sale.to_dict()), 201


@sales_bp.route('/consignment', methods=['POST'])
def create_consignment_sale():
    session = get_session()
    sale = sales_service.create_consignment_sale(session, parse_body(ConsignmentSaleCreate))
    current_app.logger.info(
        f"Consignment sale {sale.sale_code} recorded: {sale.amount} (consignment={sale.consignment_id})"
    )
    return jsonify(sale.to_dict()), 201


@sales_bp.route('/<int:sale_id>', methods=['DELETE'])
def delete_sale(sale_id):
    session = get_session()
    sales_service.delete_sale(session, sale_id)
    return jsonify({'status': 'success', 'message': 'Penjualan berhasil dihapus'})
