import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before any test module imports the domain."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


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
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    """Run every test inside the domain context and reset stores afterwards."""
    with storefront_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Shared factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    """Persist a product through AddProduct and return its id."""
    from protean import current_domain
    from storefront.catalogue.management import AddProduct

    def _make(name="Canvas Tote", price=10.0, stock=10):
        return current_domain.process(
            AddProduct(name=name, price=price, available_quantity=stock),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def make_shopper():
    """Persist a shopper through RegisterShopper and return their id."""
    from protean import current_domain
    from storefront.leads.registration import RegisterShopper

    counter = {"n": 0}

    def _make(name="Asha Rao", email=None, source="direct", role="user"):
        counter["n"] += 1
        return current_domain.process(
            RegisterShopper(
                name=name,
                email=email or f"shopper{counter['n']}@example.com",
                source=source,
                role=role,
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def address():
    return {
        "full_name": "Asha Rao",
        "address_line1": "12 Lake View Road",
        "city": "Pune",
        "state": "MH",
        "postal_code": "411001",
        "country": "IN",
        "phone": "+91-9800000000",
    }
