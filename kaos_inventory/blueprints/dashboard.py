"""Read-only endpoints: activity feed, statistics and reports."""
from flask import Blueprint, jsonify, current_app, request

from kaos_inventory.database import get_session
from kaos_inventory.exceptions import ValidationError
from kaos_inventory.services import activity_service, stats_service, report_service
from kaos_inventory.utils.request_helpers import int_arg

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/api')


@dashboard_bp.route('/activities/recent', methods=['GET'])
def recent_activities():
    session = get_session()
    limit = int_arg('limit', current_app.config['ACTIVITY_DEFAULT_LIMIT'])
    activities = activity_service.get_activities(session, limit)
    return jsonify([a.to_dict() for a in activities])


@dashboard_bp.route('/stats/products', methods=['GET'])
def product_stats():
    session = get_session()
    return jsonify(stats_service.get_product_stats(
        session,
        low_threshold=current_app.config['LOW_STOCK_THRESHOLD'],
        critical_threshold=current_app.config['CRITICAL_STOCK_THRESHOLD']
    ))


@dashboard_bp.route('/stats/consignments', methods=['GET'])
def consignment_stats():
    return jsonify(stats_service.get_consignment_stats(get_session()))


@dashboard_bp.route('/stats/sales', methods=['GET'])
def sales_stats():
    return jsonify(stats_service.get_sales_stats(get_session()))


@dashboard_bp.route('/reports', methods=['GET'])
def report():
    """
    Report for a date range.

    Query params:
        type: sales | inventory | consignment
        startDate, endDate: YYYY-MM-DD (inclusive)
    """
    report_type = request.args.get('type')
    if not report_type:
        raise ValidationError("Parameter 'type', 'startDate', dan 'endDate' diperlukan")
    start, end = report_service.parse_report_range(
        request.args.get('startDate'), request.args.get('endDate')
    )

    session = get_session()
    return jsonify(report_service.get_report(
        session, report_type, start, end,
        low_threshold=current_app.config['LOW_STOCK_THRESHOLD'],
        critical_threshold=current_app.config['CRITICAL_STOCK_THRESHOLD']
    ))
