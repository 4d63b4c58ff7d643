"""
Sales Recorder service.

Direct sales take units out of stock through adjust_stock(); sales made from
a consignment are revenue records only (the units already left stock when the
consignment was created).
"""
import logging

from kaos_inventory.exceptions import ValidationError, NotFoundError, InsufficientStockError
from kaos_inventory.models import Sale, ActivityType
from kaos_inventory.repositories import (
    SaleRepository, ProductRepository, ConsignmentRepository, ResellerRepository
)
from kaos_inventory.schemas import DirectSaleCreate, ConsignmentSaleCreate, MAX_INT
from kaos_inventory.services.activity_service import log_activity
from kaos_inventory.services.codes import claim_code
from kaos_inventory.services.product_service import adjust_stock
from kaos_inventory.services.transaction import transactional

logger = logging.getLogger(__name__)


def get_sale(session, sale_id: int):
    sale = SaleRepository(session).get(sale_id)
    if not sale:
        raise NotFoundError('Penjualan tidak ditemukan', payload={'saleId': sale_id})
    return sale


def get_sale_by_code(session, code: str):
    sale = SaleRepository(session).get_by_code(code)
    if not sale:
        raise NotFoundError(f'Penjualan dengan kode {code} tidak ditemukan')
    return sale


def list_sales(session):
    """All sales, newest first."""
    return SaleRepository(session).list()


def sale_details(session, sales):
    """
    Serialize sales; consignment sales carry a summary of their consignment
    and reseller (batch-fetched).
    """
    sales = list(sales)
    consignments = ConsignmentRepository(session).get_many(
        s.consignment_id for s in sales if s.consignment_id is not None
    )
    resellers = ResellerRepository(session).get_many(c.reseller_id for c in consignments.values())

    details = []
    for sale in sales:
        data = sale.to_dict()
        data['type'] = 'direct' if sale.is_direct else 'consignment'
        consignment = consignments.get(sale.consignment_id)
        if consignment is not None:
            reseller = resellers.get(consignment.reseller_id)
            data['consignment'] = {
                'id': consignment.id,
                'consignmentCode': consignment.consignment_code,
                'status': consignment.status.value,
                'resellerName': reseller.name if reseller else None,
            }
        else:
            data['consignment'] = None
        details.append(data)
    return details


@transactional
def create_direct_sale(session, data: DirectSaleCreate):
    """
    Record a direct (over the counter) sale and take its units out of stock.

    Every line is checked before any stock moves; quantities of a repeated
    product are summed for the stock check.

    Raises:
        ValidationError: Empty item list, non-positive quantity, total not positive or too large
        NotFoundError: Product missing
        InsufficientStockError: Not enough stock
        ConflictError: sale_code already used
    """
    if not data.items:
        raise ValidationError('Daftar produk yang dijual diperlukan')

    requested = {}
    for item in data.items:
        if item.quantity <= 0:
            raise ValidationError(
                f'Jumlah produk dengan ID {item.product_id} harus positif',
                payload={'productId': item.product_id}
            )
        if item.price_per_item < 0:
            raise ValidationError(f'Harga produk dengan ID {item.product_id} tidak boleh negatif')
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

    products = ProductRepository(session)
    for product_id, quantity in requested.items():
        product = products.lock(product_id)
        if not product:
            raise NotFoundError(f'Produk dengan ID {product_id} tidak ditemukan')
        if product.stock < quantity:
            raise InsufficientStockError(product, requested=quantity, available=product.stock)

    amount = sum(item.quantity * item.price_per_item for item in data.items)
    if amount <= 0:
        raise ValidationError('Jumlah penjualan harus positif')
    if amount > MAX_INT:
        raise ValidationError('Jumlah penjualan melebihi batas', payload={'amount': amount, 'max': MAX_INT})

    for product_id, quantity in requested.items():
        adjust_stock(session, product_id, -quantity)

    code = claim_code(session, Sale.sale_code, 'SL', requested=data.sale_code, label='Kode penjualan')
    sale = SaleRepository(session).create(
        sale_code=code,
        consignment_id=None,
        amount=amount,
        notes=data.notes
    )

    log_activity(
        session,
        ActivityType.PENJUALAN,
        f'Penjualan langsung: {amount}',
        related_id=sale.id
    )
    return sale


@transactional
def create_consignment_sale(session, data: ConsignmentSaleCreate):
    """
    Record revenue from goods a reseller sold.

    Stock and the consignment's paid_amount are left untouched; payments are
    recorded separately with consignment_service.process_payment().
    """
    consignment = ConsignmentRepository(session).get(data.consignment_id)
    if not consignment:
        raise NotFoundError('Konsinyasi tidak ditemukan', payload={'consignmentId': data.consignment_id})

    if data.amount is None or data.amount <= 0:
        raise ValidationError('Jumlah penjualan harus positif')

    code = claim_code(session, Sale.sale_code, 'SL', requested=data.sale_code, label='Kode penjualan')
    sale = SaleRepository(session).create(
        sale_code=code,
        consignment_id=consignment.id,
        amount=data.amount,
        notes=data.notes
    )

    reseller = ResellerRepository(session).get(consignment.reseller_id)
    log_activity(
        session,
        ActivityType.PENJUALAN,
        f'Penjualan konsinyasi: {reseller.name} ({data.amount})',
        related_id=sale.id
    )
    return sale


@transactional
def delete_sale(session, sale_id: int):
    """
    Delete a sale record.

    Record-only: stock taken by a direct sale is not put back and consignment
    payments are not touched.
    """
    sale = get_sale(session, sale_id)
    code = sale.sale_code
    SaleRepository(session).delete(sale)

    log_activity(session, ActivityType.HAPUS, f'Hapus penjualan: {code}', related_id=sale_id)
    logger.info(f"Sale {code} deleted without stock reversal")
    return True
