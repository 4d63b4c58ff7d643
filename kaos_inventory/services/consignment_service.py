"""
Consignment Engine - Konsinyasi lifecycle.

Status machine:
    aktif --payment--> sebagian --payment--> lunas
    aktif/sebagian --return of every unit--> return

lunas and return are terminal for payments and returns; only the
administrative edit_consignment() can move a record out of them.

Stock moves exclusively through product_service.adjust_stock(): units leave
stock when the consignment is created and come back when they are returned.
Payments never touch stock.
"""
import logging
from datetime import datetime

from kaos_inventory.exceptions import ValidationError, NotFoundError
from kaos_inventory.models import Consignment, ConsignmentStatus, ActivityType
from kaos_inventory.repositories import (
    ConsignmentRepository, ConsignmentItemRepository, ProductRepository, ResellerRepository
)
from kaos_inventory.schemas import ConsignmentCreate, ConsignmentEdit, MAX_INT
from kaos_inventory.services.activity_service import log_activity
from kaos_inventory.services.codes import claim_code
from kaos_inventory.services.product_service import adjust_stock
from kaos_inventory.services.reseller_service import get_reseller
from kaos_inventory.services.transaction import transactional

logger = logging.getLogger(__name__)


# =====================================================
# QUERIES
# =====================================================

def get_consignment(session, consignment_id: int):
    """Get consignment or raise NotFoundError."""
    consignment = ConsignmentRepository(session).get(consignment_id)
    if not consignment:
        raise NotFoundError('Konsinyasi tidak ditemukan', payload={'consignmentId': consignment_id})
    return consignment


def get_consignment_by_code(session, code: str):
    consignment = ConsignmentRepository(session).get_by_code(code)
    if not consignment:
        raise NotFoundError(f'Konsinyasi dengan kode {code} tidak ditemukan')
    return consignment


def list_consignments(session):
    return ConsignmentRepository(session).list()


def list_active_consignments(session):
    """Consignments still waiting on payment or returns (aktif, sebagian)."""
    return ConsignmentRepository(session).list_active()


def get_consignment_items(session, consignment_id: int):
    return ConsignmentItemRepository(session).list_by_consignment(consignment_id)


def consignment_details(session, consignments):
    """
    Serialize consignments with their reseller and items (each with product).

    Related rows are batch-fetched once per entity kind and joined in memory.
    """
    consignments = list(consignments)
    resellers = ResellerRepository(session).get_many(c.reseller_id for c in consignments)
    items_by_consignment = ConsignmentItemRepository(session).list_by_consignments(
        [c.id for c in consignments]
    )
    products = ProductRepository(session).get_many(
        item.product_id
        for items in items_by_consignment.values()
        for item in items
    )

    details = []
    for consignment in consignments:
        data = consignment.to_dict()
        reseller = resellers.get(consignment.reseller_id)
        data['reseller'] = reseller.to_dict() if reseller else None
        data['remainingAmount'] = consignment.remaining_amount

        items = []
        for item in items_by_consignment.get(consignment.id, []):
            item_data = item.to_dict()
            product = products.get(item.product_id)
            item_data['product'] = product.to_dict() if product else None
            items.append(item_data)
        data['items'] = items
        details.append(data)
    return details


def consignment_detail(session, consignment):
    return consignment_details(session, [consignment])[0]


# =====================================================
# PROTOCOL TRANSITIONS
# =====================================================

@transactional
def create_consignment(session, data: ConsignmentCreate):
    """
    Hand goods to a reseller.

    Every item's stock is decremented through adjust_stock(); if any item is
    short the whole consignment is rolled back.

    Raises:
        ValidationError: Empty item list, non-positive quantity, repeated product
        NotFoundError: Reseller or product missing
        InsufficientStockError: Not enough stock for an item
        ConflictError: consignment_code already used
    """
    if not data.items:
        raise ValidationError('Daftar produk konsinyasi diperlukan')

    seen = set()
    for item in data.items:
        if item.quantity <= 0:
            raise ValidationError(
                f'Jumlah produk dengan ID {item.product_id} harus positif',
                payload={'productId': item.product_id}
            )
        if item.price_per_item < 0:
            raise ValidationError(f'Harga produk dengan ID {item.product_id} tidak boleh negatif')
        if item.product_id in seen:
            raise ValidationError(
                f'Produk dengan ID {item.product_id} tercantum lebih dari sekali',
                payload={'productId': item.product_id}
            )
        seen.add(item.product_id)

    reseller = get_reseller(session, data.reseller_id)
    code = claim_code(
        session, Consignment.consignment_code, 'CN',
        requested=data.consignment_code, label='Kode konsinyasi'
    )

    total_items = sum(item.quantity for item in data.items)
    total_value = sum(item.quantity * item.price_per_item for item in data.items)
    if total_items > MAX_INT or total_value > MAX_INT:
        raise ValidationError(
            'Total konsinyasi melebihi batas',
            payload={'totalItems': total_items, 'totalValue': total_value, 'max': MAX_INT}
        )

    consignment = ConsignmentRepository(session).create(
        consignment_code=code,
        reseller_id=reseller.id,
        total_items=total_items,
        total_value=total_value,
        paid_amount=0,
        status=ConsignmentStatus.AKTIF,
        taken_date=datetime.now(),
        notes=data.notes
    )

    items = ConsignmentItemRepository(session)
    for line in data.items:
        adjust_stock(session, line.product_id, -line.quantity)
        items.create(
            consignment_id=consignment.id,
            product_id=line.product_id,
            quantity=line.quantity,
            returned_quantity=0,
            price_per_item=line.price_per_item
        )

    log_activity(
        session,
        ActivityType.KONSINYASI,
        f'Konsinyasi baru: {reseller.name} ({total_items} pcs)',
        related_id=consignment.id
    )
    return consignment


def _lock_open_consignment(session, consignment_id):
    consignment = ConsignmentRepository(session).lock(consignment_id)
    if not consignment:
        raise NotFoundError('Konsinyasi tidak ditemukan', payload={'consignmentId': consignment_id})
    if consignment.status.is_terminal:
        raise ValidationError(
            f'Konsinyasi {consignment.consignment_code} sudah berstatus {consignment.status.value}',
            payload={'status': consignment.status.value}
        )
    return consignment


@transactional
def process_payment(session, consignment_id: int, amount: int):
    """
    Record a reseller payment against a consignment.

    New status: lunas when the paid amount reaches total_value, sebagian
    otherwise. Payments above the remaining balance are rejected.

    Raises:
        ValidationError: Non-positive amount, amount above the remaining
            balance, or consignment already lunas/return
        NotFoundError: Consignment missing
    """
    if amount is None or amount <= 0:
        raise ValidationError('Jumlah pembayaran harus positif')

    consignment = _lock_open_consignment(session, consignment_id)

    remaining = consignment.remaining_amount
    if amount > remaining:
        raise ValidationError(
            f'Jumlah pembayaran melebihi sisa tagihan ({remaining})',
            payload={'remaining': remaining, 'requested': amount}
        )

    new_paid = consignment.paid_amount + amount
    if new_paid >= consignment.total_value:
        new_status = ConsignmentStatus.LUNAS
    elif new_paid > 0:
        new_status = ConsignmentStatus.SEBAGIAN
    else:
        new_status = consignment.status

    ConsignmentRepository(session).update(consignment, paid_amount=new_paid, status=new_status)

    reseller = get_reseller(session, consignment.reseller_id)
    # Payments are logged under the sales activity type
    log_activity(
        session,
        ActivityType.PENJUALAN,
        f'Pembayaran konsinyasi: {reseller.name} ({amount})',
        related_id=consignment.id
    )
    return consignment


@transactional
def process_return(session, consignment_id: int, items):
    """
    Take unsold units back from a reseller.

    All entries are validated before anything changes; returned units go back
    into stock. Once every item of the consignment is fully returned the
    status becomes `return`.

    Args:
        session: Database session
        consignment_id: Consignment ID
        items: Sequence of ReturnLine (product_id, return_quantity)

    Raises:
        ValidationError: Empty list, product not in the consignment,
            non-positive quantity, quantity above what is still out, or
            consignment already lunas/return
        NotFoundError: Consignment missing
    """
    if not items:
        raise ValidationError('Daftar produk yang dikembalikan diperlukan')

    consignment = _lock_open_consignment(session, consignment_id)
    item_repo = ConsignmentItemRepository(session)
    by_product = {item.product_id: item for item in item_repo.list_by_consignment(consignment.id)}

    # 1. Validate every entry (repeated products are checked cumulatively)
    pending = {}
    for line in items:
        item = by_product.get(line.product_id)
        if item is None:
            raise ValidationError(
                f'Produk dengan ID {line.product_id} tidak ada dalam konsinyasi ini',
                payload={'productId': line.product_id}
            )
        if line.return_quantity is None or line.return_quantity <= 0:
            raise ValidationError(
                'Jumlah pengembalian harus positif',
                payload={'productId': line.product_id}
            )
        available = item.outstanding_quantity - pending.get(item.product_id, 0)
        if line.return_quantity > available:
            raise ValidationError(
                f'Jumlah pengembalian melebihi jumlah tersedia ({available})',
                payload={'productId': line.product_id, 'available': available}
            )
        pending[item.product_id] = pending.get(item.product_id, 0) + line.return_quantity

    # 2. Apply item updates and put the units back into stock
    for product_id, quantity in pending.items():
        item = by_product[product_id]
        item_repo.update(item, returned_quantity=item.returned_quantity + quantity)
        adjust_stock(session, product_id, quantity)

    # 3. Aggregate check over every item, not only the ones just returned
    all_items = item_repo.list_by_consignment(consignment.id)
    if all(item.is_fully_returned for item in all_items):
        ConsignmentRepository(session).update(
            consignment,
            status=ConsignmentStatus.RETURN,
            return_date=datetime.now()
        )

    total_returned = sum(pending.values())
    reseller = get_reseller(session, consignment.reseller_id)
    log_activity(
        session,
        ActivityType.RETURN,
        f'Pengembalian konsinyasi: {reseller.name} ({total_returned} pcs)',
        related_id=consignment.id
    )
    return consignment


# =====================================================
# ADMINISTRATIVE OVERRIDE
# =====================================================

@transactional
def edit_consignment(session, consignment_id: int, data: ConsignmentEdit):
    """
    Overwrite consignment header fields to correct data-entry mistakes.

    Not a protocol transition: notes, total_items, total_value, taken_date
    and status are written as given, without checking them against the items
    or the paid amount. Items, paid_amount and the reseller cannot be changed.
    """
    consignment = ConsignmentRepository(session).lock(consignment_id)
    if not consignment:
        raise NotFoundError('Konsinyasi tidak ditemukan', payload={'consignmentId': consignment_id})

    changes = data.changes()
    if not changes:
        return consignment

    logger.warning(
        f"Manual edit of consignment {consignment.consignment_code}: "
        f"fields={sorted(changes)}"
    )
    ConsignmentRepository(session).update(consignment, **changes)

    log_activity(
        session,
        ActivityType.KONSINYASI,
        f'Koreksi konsinyasi {consignment.consignment_code}',
        related_id=consignment.id
    )
    return consignment
