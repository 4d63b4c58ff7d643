"""
Flask CLI commands.

Commands:
- flask init-db: Create the database tables
- flask seed: Load the sample catalogue, resellers, consignments and sales
- flask low-stock: List products at or below the low-stock threshold
"""

import click
from flask import current_app

from kaos_inventory.database import get_session, create_tables
from kaos_inventory.exceptions import KaosError
from kaos_inventory.models import Product
from kaos_inventory.schemas import (
    ProductCreate, ResellerCreate, ConsignmentCreate, LineItem,
    DirectSaleCreate, ConsignmentSaleCreate
)
from kaos_inventory.services import (
    product_service, reseller_service, consignment_service, sales_service
)

SAMPLE_PRODUCTS = [
    ('KD-001', 'Kaos Dewasa', 'M', 85, 95000, 'Hitam polos'),
    ('KD-002', 'Kaos Dewasa', 'L', 72, 95000, None),
    ('KD-003', 'Kaos Dewasa', 'XL', 124, 100000, None),
    ('KDP-001', 'Kaos Dewasa Panjang', 'L', 18, 115000, None),
    ('KDP-002', 'Kaos Dewasa Panjang', 'XL', 32, 120000, None),
    ('KB-001', 'Kaos Bloombee', '3XL', 8, 140000, 'Premium'),
    ('KA-001', 'Kaos Anak', 'M', 75, 75000, 'Biru polos'),
    ('KAT-001', 'Kaos Anak Tanggung', 'L', 42, 85000, 'Merah polos'),
]

SAMPLE_RESELLERS = [
    ('Budi Santoso', '0812-3456-7890', 'Jl. Merdeka No. 123, Jakarta'),
    ('Dewi Lestari', '0856-7890-1234', 'Jl. Pahlawan No. 45, Bandung'),
]


def seed_sample_data(session):
    """
    Insert the sample data through the services, so stock levels and the
    activity log stay consistent with the consignments and sales.
    """
    products = {}
    for code, shirt_type, size, stock, price, notes in SAMPLE_PRODUCTS:
        products[code] = product_service.create_product(session, ProductCreate(
            product_code=code, type=shirt_type, size=size, stock=stock, price=price, notes=notes
        ))

    budi, dewi = [
        reseller_service.create_reseller(session, ResellerCreate(name=name, phone=phone, address=address))
        for name, phone, address in SAMPLE_RESELLERS
    ]

    first = consignment_service.create_consignment(session, ConsignmentCreate(
        reseller_id=budi.id,
        consignment_code='CN-1001',
        notes='Konsinyasi pertama',
        items=[
            LineItem(product_id=products['KD-003'].id, quantity=15, price_per_item=110000),
            LineItem(product_id=products['KD-002'].id, quantity=10, price_per_item=105000),
        ]
    ))
    second = consignment_service.create_consignment(session, ConsignmentCreate(
        reseller_id=dewi.id,
        consignment_code='CN-1002',
        notes='Konsinyasi anak',
        items=[LineItem(product_id=products['KA-001'].id, quantity=15, price_per_item=95000)]
    ))
    consignment_service.process_payment(session, second.id, 800000)

    sales_service.create_direct_sale(session, DirectSaleCreate(
        sale_code='SL-1001',
        notes='Penjualan langsung',
        items=[LineItem(product_id=products['KD-001'].id, quantity=10, price_per_item=95000)]
    ))
    sales_service.create_consignment_sale(session, ConsignmentSaleCreate(
        consignment_id=first.id,
        amount=550000,
        sale_code='SL-1002',
        notes='Penjualan dari konsinyasi Budi'
    ))
    return {
        'products': len(products),
        'resellers': 2,
        'consignments': 2,
        'sales': 2,
    }


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all database tables."""
        create_tables()
        click.echo(click.style('✅ Tabel database berhasil dibuat', fg='green'))

    @app.cli.command('seed')
    def seed_command():
        """Load sample data into an empty database."""
        session = get_session()
        create_tables()

        if session.query(Product.id).first() is not None:
            click.echo(click.style('⚠️  Database sudah berisi data, seed dilewati.', fg='yellow'))
            return

        try:
            counts = seed_sample_data(session)
        except KaosError as e:
            click.echo(click.style(f'❌ Gagal memuat data contoh: {e.message}', fg='red'))
            raise SystemExit(1)

        click.echo(click.style('\n✅ Data contoh berhasil dimuat!', fg='green', bold=True))
        for name, count in counts.items():
            click.echo(f'   {name}: {count}')

    @app.cli.command('low-stock')
    @click.option('--threshold', type=int, default=None, help='Stock threshold (default: LOW_STOCK_THRESHOLD)')
    def low_stock_command(threshold):
        """List products at or below the low-stock threshold."""
        if threshold is None:
            threshold = current_app.config['LOW_STOCK_THRESHOLD']
        critical = current_app.config['CRITICAL_STOCK_THRESHOLD']

        products = product_service.get_low_stock_products(get_session(), threshold)
        if not products:
            click.echo(click.style(f'Tidak ada produk dengan stok <= {threshold}', fg='green'))
            return

        for product in products:
            color = 'red' if product.stock <= critical else 'yellow'
            click.echo(click.style(
                f'{product.product_code:<10} {product.label:<28} {product.stock:>5} pcs',
                fg=color
            ))
