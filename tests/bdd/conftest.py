"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from protean.exceptions import ProteanException
from pytest_bdd import given, parsers, then
from storefront.catalogue import stock
from storefront.catalogue.product import Product


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def products():
    """Product ids by name, filled in by Given steps."""
    return {}


@pytest.fixture()
def error():
    """Container for the failure raised by a When step."""
    return {"exc": None}


@pytest.fixture()
def outcome():
    """Container for the value returned by a When step."""
    return {"result": None}


@pytest.fixture()
def attempt(error, outcome):
    """Run a When action, keeping its result or the domain error it raised."""

    def _attempt(action):
        try:
            outcome["result"] = action()
        except ProteanException as exc:
            error["exc"] = exc
        return outcome["result"]

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:g} with {quantity:d} in stock'))
def product_in_stock(products, make_product, name, price, quantity):
    products[name] = make_product(name=name, price=price, stock=quantity)


@given(parsers.cfparse('a product "{name}" with {quantity:d} in stock'))
def product_with_stock(products, make_product, name, quantity):
    products[name] = make_product(name=name, stock=quantity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {quantity:d} in stock'))
def stock_is(products, name, quantity):
    assert stock.peek(products[name]) == quantity


@then(parsers.cfparse('"{name}" is rated {average:g} from {count:d} reviews'))
def product_rating_is(products, name, average, count):
    product = current_domain.repository_for(Product).get(products[name])
    assert product.average_rating == average
    assert product.rating_count == count


@then(parsers.cfparse('the action fails with "{error_type}"'))
def action_fails_with(error, error_type):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_type


@then("the action succeeds")
def action_succeeds(error):
    assert error["exc"] is None
