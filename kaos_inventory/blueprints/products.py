from flask import Blueprint, jsonify, current_app

from kaos_inventory.database import get_session
from kaos_inventory.schemas import ProductCreate, ProductUpdate
from kaos_inventory.services import product_service
from kaos_inventory.utils.request_helpers import parse_body, int_arg

products_bp = Blueprint('products', __name__, url_prefix='/api/products')


@products_bp.route('', methods=['GET'])
def list_products():
    session = get_session()
    products = product_service.list_products(session)
    return jsonify([p.to_dict() for p in products])


@products_bp.route('/low-stock', methods=['GET'])
def low_stock():
    """Products at or below the low-stock threshold (default from config)."""
    session = get_session()
    threshold = int_arg('threshold', current_app.config['LOW_STOCK_THRESHOLD'])
    products = product_service.get_low_stock_products(session, threshold)
    return jsonify([p.to_dict() for p in products])


@products_bp.route('/<int:product_id>', methods=['GET'])
def get_product(product_id):
    session = get_session()
    return jsonify(product_service.get_product(session, product_id).to_dict())


@products_bp.route('', methods=['POST'])
def create_product():
    session = get_session()
    data = parse_body(ProductCreate)
    product = product_service.create_product(session, data)
    current_app.logger.info(f"Product {product.product_code} created (stock={product.stock})")
    return jsonify(product.to_dict()), 201


@products_bp.route('/<int:product_id>', methods=['PATCH'])
def update_product(product_id):
    session = get_session()
    data = parse_body(ProductUpdate)
    product = product_service.update_product(session, product_id, data)
    current_app.logger.info(f"Product {product.product_code} updated: {sorted(data.changes())}")
    return jsonify(product.to_dict())


@products_bp.route('/<int:product_id>', methods=['DELETE'])
def delete_product(product_id):
    session = get_session()
    product_service.delete_product(session, product_id)
    current_app.logger.info(f"Product {product_id} deleted")
    return jsonify({'status': 'success', 'message': 'Produk berhasil dihapus'})
