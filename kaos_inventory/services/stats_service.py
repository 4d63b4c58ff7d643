"""
Statistics service.
Read-only aggregates for the dashboard cards (products, consignments, sales).
"""
from datetime import datetime

from sqlalchemy import func, or_

from kaos_inventory.models import Product, Consignment, ConsignmentItem, Sale, ConsignmentStatus

DEFAULT_LOW_STOCK_THRESHOLD = 30
DEFAULT_CRITICAL_STOCK_THRESHOLD = 10


def _active_filter():
    return or_(
        Consignment.status == ConsignmentStatus.AKTIF,
        Consignment.status == ConsignmentStatus.SEBAGIAN
    )


def get_product_stats(session,
                      low_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
                      critical_threshold: int = DEFAULT_CRITICAL_STOCK_THRESHOLD) -> dict:
    """
    Stock totals.

    Returns:
        dict with totalStock, totalConsigned (units still out with resellers),
        productCount, lowStockCount, criticalStockCount
    """
    total_stock, product_count = session.query(
        func.coalesce(func.sum(Product.stock), 0),
        func.count(Product.id)
    ).one()

    total_consigned = session.query(
        func.coalesce(func.sum(ConsignmentItem.quantity - ConsignmentItem.returned_quantity), 0)
    ).scalar()

    low_stock_count = session.query(func.count(Product.id)).filter(
        Product.stock <= low_threshold
    ).scalar()
    critical_stock_count = session.query(func.count(Product.id)).filter(
        Product.stock <= critical_threshold
    ).scalar()

    return {
        'totalStock': int(total_stock),
        'totalConsigned': int(total_consigned),
        'productCount': product_count,
        'lowStockCount': low_stock_count,
        'criticalStockCount': critical_stock_count,
    }


def get_consignment_stats(session) -> dict:
    """
    Consignment totals.

    pendingPayment and activeResellers only count consignments that are
    still open (aktif, sebagian).
    """
    total_consigned, consignment_count = session.query(
        func.coalesce(func.sum(Consignment.total_items), 0),
        func.count(Consignment.id)
    ).one()

    pending_payment, active_count, active_resellers = session.query(
        func.coalesce(func.sum(Consignment.total_value - Consignment.paid_amount), 0),
        func.count(Consignment.id),
        func.count(func.distinct(Consignment.reseller_id))
    ).filter(_active_filter()).one()

    return {
        'totalConsigned': int(total_consigned),
        'activeResellers': active_resellers,
        'pendingPayment': int(pending_payment),
        'consignmentCount': consignment_count,
        'activeConsignmentCount': active_count,
    }


def get_sales_stats(session, now: datetime = None) -> dict:
    """Sales today, this month and overall (local server time)."""
    now = now or datetime.now()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    month_start = today_start.replace(day=1)

    def _sum_since(start):
        return session.query(func.coalesce(func.sum(Sale.amount), 0)).filter(
            Sale.sale_date >= start
        ).scalar()

    total_sales, total_transactions = session.query(
        func.coalesce(func.sum(Sale.amount), 0),
        func.count(Sale.id)
    ).one()

    return {
        'dailySales': int(_sum_since(today_start)),
        'monthlySales': int(_sum_since(month_start)),
        'totalSales': int(total_sales),
        'totalTransactions': total_transactions,
    }
