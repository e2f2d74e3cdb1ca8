from locust import HttpUser, task, between
import random


class ReorderUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Sign up an account and a list for this simulated client
        email = f"user_{random.randint(1, 1_000_000)}@example.com"
        self.headers = None
        self.list_id = None
        self.product_ids = []
        r = self.client.post("/auth/signup", json={"email": email, "password": "load-test"})
        if r.status_code != 201:
            return
        self.headers = {"Authorization": f"Bearer {r.json()['access_token']}"}
        self.refresh_token = r.json()["refresh_token"]
        r = self.client.post("/reorder/list", json={"name": "Load test"}, headers=self.headers)
        if r.status_code == 201:
            self.list_id = r.json()["id"]

    @task(3)
    def add_product(self):
        if not self.list_id:
            return
        sku = f"SKU{random.randint(1, 20)}"
        r = self.client.post(
            f"/reorder/product/{self.list_id}",
            json={"sku": sku, "name": sku, "quantity": random.randint(1, 5)},
            headers=self.headers,
            name="/reorder/product/[list]",
        )
        if r.status_code == 200:
            self.product_ids = [p["id"] for p in r.json()["products"]]

    @task(2)
    def adjust_product(self):
        if not self.product_ids:
            return
        product_id = random.choice(self.product_ids)
        kind = random.choice(["increase", "decrease", "set"])
        payload = {"type": kind, "quantity": random.randint(0, 10)} if kind == "set" else {"type": kind}
        r = self.client.patch(f"/reorder/product/{product_id}", json=payload, headers=self.headers, name="/reorder/product/[id]")
        if r.status_code == 200 and r.json()["action"] == "deleted":
            self.product_ids.remove(product_id)

    @task(1)
    def refresh(self):
        # access tokens are short-lived; rotate through the refresh endpoint
        if not self.headers:
            return
        r = self.client.post("/auth/refresh", json={"refresh_token": self.refresh_token})
        if r.status_code == 200:
            self.headers = {"Authorization": f"Bearer {r.json()['access_token']}"}
            self.refresh_token = r.json()["refresh_token"]
