"""Checkout hot-path load test scenarios.

``CheckoutJourney`` walks one shopper through register → browse → cart →
order → pay. ``FlashSaleUser`` hammers a single low-stock product to drive
the stock ledger's contended reserve path; sold-out responses are expected
and counted as successes.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import checkout_data, payment_result, product_data, shopper_data
from loadtests.helpers.response import extract_error_detail, is_insufficient_stock
from loadtests.helpers.state import ShopperState

ADMIN_HEADERS = {"X-User-Id": "loadtest-admin", "X-User-Role": "admin"}


def _seed_products(client, count, stock=None):
    product_ids = []
    for _ in range(count):
        resp = client.post("/products", json=product_data(stock), headers=ADMIN_HEADERS, name="POST /products")
        if resp.status_code == 201:
            product_ids.append(resp.json()["product_id"])
    return product_ids


class CheckoutJourney(SequentialTaskSet):
    """Register -> View -> Add to Cart (x2) -> Place Order from Cart -> Pay.

    Generates lead activities: register, login, view_product, add_to_cart,
    place_order. Debits stock for every cart line.
    """

    def on_start(self):
        self.state = ShopperState()

    def _headers(self):
        return {"X-User-Id": self.state.shopper_id}

    @task
    def register(self):
        with self.client.post("/shoppers", json=shopper_data(), catch_response=True, name="POST /shoppers") as resp:
            if resp.status_code == 201:
                self.state.shopper_id = resp.json()["id"]
            else:
                resp.failure(f"Register failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def log_in(self):
        self.client.post(
            f"/shoppers/{self.state.shopper_id}/login", headers=self._headers(), name="POST /shoppers/{id}/login"
        )

    @task
    def view_and_add(self):
        for product_id in random.sample(self.user.product_ids, k=min(2, len(self.user.product_ids))):
            self.client.get(f"/products/{product_id}", headers=self._headers(), name="GET /products/{id}")
            with self.client.post(
                "/cart",
                json={"product_id": product_id, "quantity": random.randint(1, 3)},
                headers=self._headers(),
                catch_response=True,
                name="POST /cart",
            ) as resp:
                if resp.status_code != 200 and not is_insufficient_stock(resp):
                    resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json=checkout_data(from_cart=True),
            headers=self._headers(),
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["id"]
                self.state.order_status = resp.json()["status"]
            elif is_insufficient_stock(resp):
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Place order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def pay(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/pay",
            json=payment_result(),
            headers=self._headers(),
            catch_response=True,
            name="PUT /orders/{id}/pay",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Payment failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CheckoutUser(HttpUser):
    wait_time = between(0.5, 2)
    tasks = [CheckoutJourney]

    def on_start(self):
        self.product_ids = _seed_products(self.client, 5)


class FlashSaleUser(HttpUser):
    """Many shoppers racing for a handful of units of one product."""

    wait_time = between(0.05, 0.2)

    def on_start(self):
        self.product_ids = _seed_products(self.client, 1, stock=20)
        resp = self.client.post("/shoppers", json=shopper_data(), name="POST /shoppers")
        self.shopper_id = resp.json()["id"] if resp.status_code == 201 else None

    @task
    def grab_one(self):
        if not self.product_ids or not self.shopper_id:
            return
        payload = checkout_data(from_cart=False, items=[{"product_id": self.product_ids[0], "quantity": 1}])
        with self.client.post(
            "/orders",
            json=payload,
            headers={"X-User-Id": self.shopper_id},
            catch_response=True,
            name="POST /orders (flash sale)",
        ) as resp:
            if resp.status_code == 201 or is_insufficient_stock(resp):
                resp.success()
            else:
                resp.failure(f"Flash sale order failed: {resp.status_code}: {extract_error_detail(resp)}")
