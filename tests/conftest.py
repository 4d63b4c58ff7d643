import pytest
import uuid

from kaos_inventory import create_app
from kaos_inventory.database import get_session, create_tables, drop_tables
from kaos_inventory.models import ShirtType, ShirtSize
from kaos_inventory.schemas import ProductCreate, ResellerCreate, ConsignmentCreate, LineItem
from kaos_inventory.services import product_service, reseller_service, consignment_service


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite)."""
    app = create_app('kaos_inventory.config.TestConfig')
    return app


@pytest.fixture(autouse=True)
def clean_database(app):
    """Every test starts from empty tables."""
    get_session().remove()
    drop_tables()
    create_tables()
    yield
    get_session().remove()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session():
    """Database session shared with the services under test."""
    session = get_session()
    yield session
    session.rollback()


def _make_product(session, stock=50, price=1000, shirt_type=ShirtType.KAOS_DEWASA, size=ShirtSize.L):
    """Create a product with a unique code."""
    suffix = str(uuid.uuid4())[:8]
    return product_service.create_product(session, ProductCreate(
        product_code=f'TST-{suffix}',
        type=shirt_type,
        size=size,
        stock=stock,
        price=price
    ))


def _consign(session, reseller, *lines):
    """Create a consignment from (product, quantity, price) tuples."""
    return consignment_service.create_consignment(session, ConsignmentCreate(
        reseller_id=reseller.id,
        items=[
            LineItem(product_id=product.id, quantity=quantity, price_per_item=price)
            for product, quantity, price in lines
        ]
    ))


@pytest.fixture(scope='function')
def product(session):
    """Product P with stock 50."""
    return _make_product(session, stock=50, price=1000)


@pytest.fixture(scope='function')
def reseller(session):
    """Create test reseller."""
    return reseller_service.create_reseller(session, ResellerCreate(
        name='Budi Santoso',
        phone='0812-3456-7890',
        address='Jl. Merdeka No. 123, Jakarta'
    ))


@pytest.fixture(scope='function')
def consignment(session, reseller, product):
    """Consignment of 20 units of product P at 1000 each."""
    return _consign(session, reseller, (product, 20, 1000))


@pytest.fixture(scope='function')
def make_product(session):
    """Factory: make_product(stock=..., price=...) -> Product."""
    def factory(**kwargs):
        return _make_product(session, **kwargs)
    return factory


@pytest.fixture(scope='function')
def consign(session):
    """Factory: consign(reseller, (product, quantity, price), ...) -> Consignment."""
    def factory(reseller, *lines):
        return _consign(session, reseller, *lines)
    return factory
