"""
Product Ledger service.

Owns the stock count of every product. adjust_stock() is the single stock
mutator; consignment and sales services call it so every movement leaves a
`stok` activity behind.
"""
import logging

from kaos_inventory.exceptions import ValidationError, NotFoundError, ConflictError, InsufficientStockError
from kaos_inventory.models import ActivityType
from kaos_inventory.repositories import ProductRepository, ConsignmentItemRepository
from kaos_inventory.schemas import ProductCreate, ProductUpdate, MAX_INT
from kaos_inventory.services.activity_service import log_activity
from kaos_inventory.services.transaction import transactional

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 30


def get_product(session, product_id: int):
    """Get product or raise NotFoundError."""
    product = ProductRepository(session).get(product_id)
    if not product:
        raise NotFoundError(f'Produk dengan ID {product_id} tidak ditemukan')
    return product


def get_product_by_code(session, code: str):
    product = ProductRepository(session).get_by_code(code)
    if not product:
        raise NotFoundError(f'Produk dengan kode {code} tidak ditemukan')
    return product


def list_products(session):
    return ProductRepository(session).list()


def get_low_stock_products(session, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD):
    """Products with stock <= threshold, lowest stock first."""
    if threshold is None:
        threshold = DEFAULT_LOW_STOCK_THRESHOLD
    return ProductRepository(session).list_low_stock(threshold)


def adjust_stock(session, product_id: int, delta: int):
    """
    Apply a stock delta to a product (the only way stock changes).

    Does not commit: the caller's transaction owns the change, so a failure
    later in the same operation rolls this adjustment back too.

    Args:
        session: Database session
        product_id: Product ID
        delta: Positive = stock in (return, intake), negative = stock out

    Returns:
        The locked, updated Product

    Raises:
        NotFoundError: If the product does not exist
        InsufficientStockError: If stock + delta would be negative
        ValidationError: If stock + delta exceeds MAX_INT
    """
    products = ProductRepository(session)
    product = products.lock(product_id)
    if not product:
        raise NotFoundError(f'Produk dengan ID {product_id} tidak ditemukan')

    if delta == 0:
        return product

    new_stock = product.stock + delta
    if new_stock < 0:
        raise InsufficientStockError(product, requested=-delta, available=product.stock)
    if new_stock > MAX_INT:
        raise ValidationError(
            f'Stok {product.label} melebihi batas',
            payload={'productId': product.id, 'stock': product.stock, 'max': MAX_INT}
        )

    products.update(product, stock=new_stock)

    action = 'Tambah' if delta > 0 else 'Kurang'
    log_activity(
        session,
        ActivityType.STOK,
        f'{action} stok {product.label} ({abs(delta)} pcs)',
        related_id=product.id
    )
    return product


def _ensure_code_available(products, code, exclude_id=None):
    existing = products.get_by_code(code)
    if existing and existing.id != exclude_id:
        raise ConflictError(f"Kode produk '{code}' sudah digunakan")


@transactional
def create_product(session, data: ProductCreate):
    """
    Register a product (inventory intake) with its initial stock.

    Raises:
        ConflictError: If product_code already exists
    """
    products = ProductRepository(session)
    _ensure_code_available(products, data.product_code)

    product = products.create(
        product_code=data.product_code,
        type=data.type,
        size=data.size,
        stock=data.stock,
        price=data.price,
        notes=data.notes
    )

    log_activity(
        session,
        ActivityType.STOK,
        f'Tambah stok {product.label} ({product.stock} pcs)',
        related_id=product.id
    )
    return product


@transactional
def update_product(session, product_id: int, data: ProductUpdate):
    """
    Update product fields. A changed stock value is applied through
    adjust_stock() with the computed delta.
    """
    products = ProductRepository(session)
    product = get_product(session, product_id)
    changes = data.changes()

    new_stock = changes.pop('stock', None)
    if 'product_code' in changes:
        _ensure_code_available(products, changes['product_code'], exclude_id=product.id)

    # Explicit nulls only make sense for notes
    fields = {k: v for k, v in changes.items() if v is not None or k == 'notes'}
    if fields:
        products.update(product, **fields)

    if new_stock is not None:
        adjust_stock(session, product.id, new_stock - product.stock)

    return product


@transactional
def delete_product(session, product_id: int):
    """
    Delete a product that was never consigned.

    Raises:
        NotFoundError: If the product does not exist
        ConflictError: If any consignment item references the product
    """
    product = get_product(session, product_id)

    if ConsignmentItemRepository(session).exists_for_product(product.id):
        raise ConflictError(
            'Produk sedang dalam konsinyasi, tidak dapat dihapus',
            payload={'productId': product.id}
        )

    label = product.label
    ProductRepository(session).delete(product)
    log_activity(session, ActivityType.HAPUS, f'Hapus produk {label}', related_id=product_id)
    return True
