"""Fixtures for API tests: a FastAPI app wired like ``app.py``, minus CORS."""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from storefront.api import register_error_handlers, routers
from storefront.domain import storefront


@pytest.fixture()
def client():
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with storefront.domain_context():
            return await call_next(request)

    for router in routers:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def product_id(client):
    response = client.post(
        "/products",
        json={"name": "Canvas Tote", "price": 10.0, "available_quantity": 5},
        headers={"X-User-Id": "admin-1", "X-User-Role": "admin"},
    )
    assert response.status_code == 201
    return response.json()["product_id"]
