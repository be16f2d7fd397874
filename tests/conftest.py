import json
import os
from pathlib import Path

import pytest

# Cheap password hashing for the whole run; must be set before settings are cached
os.environ.setdefault("STOREFRONT_BCRYPT_ROUNDS", "4")


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def _storefront_domain(request):
    """Initialize the storefront domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Persisted test data, created through the same commands the API uses
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_user():
    from protean import current_domain
    from storefront.identity.user.registration import RegisterUser

    counter = {"n": 0}

    def _make(name="Test User", email=None, password="secret123", role=None, **kwargs):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        return current_domain.process(
            RegisterUser(name=name, email=email, password=password, role=role, **kwargs),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def make_category():
    from protean import current_domain
    from storefront.catalogue.category.management import CreateCategory

    def _make(name="Shoes", parent_id=None, **kwargs):
        return current_domain.process(CreateCategory(name=name, parent_id=parent_id, **kwargs), asynchronous=False)

    return _make


@pytest.fixture()
def make_product(make_category):
    """Create and activate a product. A category is created when none is given."""
    from protean import current_domain
    from storefront.catalogue.product.creation import CreateProduct
    from storefront.catalogue.product.lifecycle import ActivateProduct

    def _make(name="Trail Runner", price=50.0, category_id=None, inventory=None, active=True, **kwargs):
        category_id = category_id or make_category()
        product_id = current_domain.process(
            CreateProduct(
                name=name,
                description=f"{name} description",
                category_id=category_id,
                brand="Acme",
                price=price,
                inventory=json.dumps(inventory) if inventory else None,
                **kwargs,
            ),
            asynchronous=False,
        )
        if active:
            current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
        return product_id

    return _make


@pytest.fixture()
def shipping_address():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "street": "123 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "country": "US",
    }


@pytest.fixture()
def api_app(_storefront_domain):
    """The HTTP surface as ``src/app.py`` assembles it, without re-initializing the domain."""
    from fastapi import FastAPI, Request
    from storefront.catalogue.api import category_router, product_router
    from storefront.identity.api import router as user_router
    from storefront.maintenance.routes import maintenance_router
    from storefront.ordering.api import cart_router, order_router
    from storefront.reviews.api import review_router
    from storefront.shared.api import register_error_handlers
    from storefront.utils.logging import add_context, clear_context

    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        clear_context()
        add_context(method=request.method, path=request.url.path)
        with _storefront_domain.domain_context():
            return await call_next(request)

    for router in (
        user_router,
        category_router,
        product_router,
        cart_router,
        order_router,
        review_router,
        maintenance_router,
    ):
        app.include_router(router)
    register_error_handlers(app)
    return app


@pytest.fixture()
def client(api_app):
    from fastapi.testclient import TestClient

    return TestClient(api_app, raise_server_exceptions=False)


@pytest.fixture()
def auth():
    """Headers naming the calling user."""

    def _headers(user_id):
        return {"Authorization": f"Bearer {user_id}"}

    return _headers
