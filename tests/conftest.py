import pytest
from decimal import Decimal

from panaderia import create_app
from panaderia.database import Base, get_engine, get_session
from panaderia.models import Category, Product, RawMaterial
from panaderia.services.currency_service import CurrencyPolicy


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(scope='function', autouse=True)
def schema(app):
    """Fresh schema for every test (in-memory SQLite, one shared connection)."""
    Base.metadata.create_all(get_engine())
    yield
    get_session().remove()
    Base.metadata.drop_all(get_engine())


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def cashier_headers():
    return {'X-User-Id': 'cajero-1', 'X-User-Role': 'CAJERO'}


@pytest.fixture(scope='function')
def admin_headers():
    return {'X-User-Id': 'admin-1', 'X-User-Role': 'ADMIN'}


@pytest.fixture(scope='function')
def session():
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()


@pytest.fixture(scope='function')
def policy():
    """Currency policy with the test fallback rate."""
    return CurrencyPolicy(base_currency='NIO', foreign_currency='USD', fallback_rate=Decimal('36.50'))


@pytest.fixture(scope='function')
def category(session):
    category = Category(name='Panadería')
    session.add(category)
    session.commit()
    return category


@pytest.fixture(scope='function')
def make_product(session, category):
    """Factory: make_product(name, qty, sale_price, unit_cost)."""
    def _make(name='Pan', qty=10, sale_price='25.00', unit_cost=None):
        product = Product(
            name=name,
            available_qty=qty,
            sale_price=Decimal(sale_price) if sale_price is not None else None,
            unit_cost=Decimal(unit_cost) if unit_cost is not None else None,
            category_id=category.id
        )
        session.add(product)
        session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def product(make_product):
    """Product P: price 25.00, stock 10."""
    return make_product(name='Pan de yuca', qty=10, sale_price='25.00')


@pytest.fixture(scope='function')
def make_raw_material(session):
    """Factory: make_raw_material(name, unit, stock, average_cost)."""
    def _make(name='Harina', unit='kg', stock='10', average_cost='20.00'):
        raw_material = RawMaterial(
            name=name,
            unit=unit,
            stock=Decimal(stock),
            average_cost=Decimal(average_cost)
        )
        session.add(raw_material)
        session.commit()
        return raw_material
    return _make


@pytest.fixture(scope='function')
def stock_of(session):
    """Current available quantity read straight from the database."""
    def _stock(product_id):
        return session.query(Product.available_qty).filter(Product.id == product_id).scalar()
    return _stock
