"""
Report service.

Builds the sales, inventory and consignment reports for a date range.
"""
import logging
from datetime import datetime, timedelta

from kaos_inventory.exceptions import ValidationError
from kaos_inventory.models import ConsignmentStatus, ShirtType
from kaos_inventory.repositories import (
    ProductRepository, ConsignmentRepository, ConsignmentItemRepository, SaleRepository
)

logger = logging.getLogger(__name__)

REPORT_TYPES = ('sales', 'inventory', 'consignment')
DAILY_SERIES_MAX_DAYS = 31
DIRECT_SALES_LABEL = 'Penjualan langsung'


def parse_report_range(start_date, end_date):
    """
    Parse ISO dates (YYYY-MM-DD or full datetimes) into an inclusive range.

    The end is extended to the last microsecond of its day.

    Raises:
        ValidationError: Missing or malformed dates, or start after end
    """
    if not start_date or not end_date:
        raise ValidationError("Parameter 'type', 'startDate', dan 'endDate' diperlukan")
    try:
        start = datetime.fromisoformat(start_date)
        end = datetime.fromisoformat(end_date)
    except ValueError:
        raise ValidationError('Format tanggal tidak valid (gunakan YYYY-MM-DD)')

    start = start.replace(tzinfo=None)
    end = end.replace(hour=23, minute=59, second=59, microsecond=999999, tzinfo=None)
    if start > end:
        raise ValidationError('Tanggal mulai tidak boleh setelah tanggal akhir')
    return start, end


def get_report(session, report_type, start: datetime, end: datetime,
               low_threshold: int = 30, critical_threshold: int = 10) -> dict:
    """
    Build a report.

    Args:
        session: Database session
        report_type: 'sales', 'inventory' or 'consignment'
        start: Range start (inclusive)
        end: Range end (inclusive)

    Raises:
        ValidationError: Unknown report type
    """
    if report_type == 'sales':
        report = _sales_report(session, start, end)
    elif report_type == 'inventory':
        report = _inventory_report(session, low_threshold, critical_threshold)
    elif report_type == 'consignment':
        report = _consignment_report(session, start, end)
    else:
        raise ValidationError(
            f"Jenis laporan '{report_type}' tidak dikenal",
            payload={'allowed': list(REPORT_TYPES)}
        )

    logger.info(f"Report '{report_type}' built for {start.date()} - {end.date()}")
    report['type'] = report_type
    report['startDate'] = start.date().isoformat()
    report['endDate'] = end.date().isoformat()
    return report


def _sales_report(session, start, end):
    sales = SaleRepository(session).list_between(start, end)

    total_sales = sum(s.amount for s in sales)
    direct_sales = sum(s.amount for s in sales if s.is_direct)

    return {
        'totalSales': total_sales,
        'totalTransactions': len(sales),
        'averageTransaction': total_sales / len(sales) if sales else 0,
        'directSales': direct_sales,
        'consignmentSales': total_sales - direct_sales,
        'chartData': _time_series(sales, start, end),
        'productData': _sales_by_shirt_type(session, sales),
        'items': [s.to_dict() for s in sales],
    }


def _by_shirt_type():
    return {shirt_type.value: 0 for shirt_type in ShirtType}


def _as_chart(totals):
    return [{'name': name, 'value': value} for name, value in totals.items()]


def _sales_by_shirt_type(session, sales):
    """
    Sales revenue per shirt type.

    A consignment sale is spread over its consignment's items in proportion
    to each item's value (quantity x price). Direct-sale lines are not
    stored, so direct sales get their own bucket.
    """
    totals = _by_shirt_type()
    totals[DIRECT_SALES_LABEL] = 0

    consignments = ConsignmentRepository(session).get_many(
        s.consignment_id for s in sales if not s.is_direct
    )
    items_by_consignment = ConsignmentItemRepository(session).list_by_consignments(list(consignments))
    products = ProductRepository(session).get_many(
        item.product_id
        for items in items_by_consignment.values()
        for item in items
    )

    for sale in sales:
        consignment = consignments.get(sale.consignment_id)
        if consignment is None:
            totals[DIRECT_SALES_LABEL] += sale.amount
            continue
        if not consignment.total_value:
            continue
        ratio = sale.amount / consignment.total_value
        for item in items_by_consignment.get(consignment.id, []):
            product = products.get(item.product_id)
            if product is not None:
                totals[product.type.value] += item.quantity * item.price_per_item * ratio

    return _as_chart({name: round(value) for name, value in totals.items()})


def _time_series(sales, start, end):
    """Daily totals for short ranges, monthly totals otherwise."""
    days = (end.date() - start.date()).days + 1
    totals = {}

    if days <= DAILY_SERIES_MAX_DAYS:
        day = start.date()
        while day <= end.date():
            totals[day.isoformat()] = 0
            day += timedelta(days=1)
        for sale in sales:
            key = sale.sale_date.date().isoformat()
            totals[key] = totals.get(key, 0) + sale.amount
    else:
        for sale in sales:
            key = sale.sale_date.strftime('%Y-%m')
            totals[key] = totals.get(key, 0) + sale.amount

    return [{'name': name, 'value': value} for name, value in sorted(totals.items())]


def _inventory_report(session, low_threshold, critical_threshold):
    products = ProductRepository(session).list()

    stock_by_type = _by_shirt_type()
    for product in products:
        stock_by_type[product.type.value] += product.stock

    return {
        'totalStock': sum(p.stock for p in products),
        'totalProducts': len(products),
        'lowStockCount': sum(1 for p in products if p.stock <= low_threshold),
        'criticalStockCount': sum(1 for p in products if p.stock <= critical_threshold),
        'chartData': _as_chart(stock_by_type),
        'productData': _as_chart(stock_by_type),
        'items': [p.to_dict() for p in products],
    }


def _consignment_report(session, start, end):
    consignments = ConsignmentRepository(session).list_taken_between(start, end)

    items_by_status = {status.value: 0 for status in ConsignmentStatus}
    for consignment in consignments:
        items_by_status[consignment.status.value] += consignment.total_items

    # Units handed out per shirt type, returns included
    items_by_consignment = ConsignmentItemRepository(session).list_by_consignments(
        [c.id for c in consignments]
    )
    products = ProductRepository(session).get_many(
        item.product_id
        for items in items_by_consignment.values()
        for item in items
    )
    units_by_type = _by_shirt_type()
    for items in items_by_consignment.values():
        for item in items:
            product = products.get(item.product_id)
            if product is not None:
                units_by_type[product.type.value] += item.quantity

    return {
        'totalConsigned': sum(c.total_items for c in consignments),
        'totalValue': sum(c.total_value for c in consignments),
        'totalResellers': len({c.reseller_id for c in consignments}),
        'pendingPayment': sum(
            c.remaining_amount for c in consignments if not c.status.is_terminal
        ),
        'chartData': _as_chart(items_by_status),
        'productData': _as_chart(units_by_type),
        'items': [c.to_dict() for c in consignments],
    }
