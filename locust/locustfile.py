"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags oversell     # Fans racing for a small free event
  locust -f locustfile.py --tags checkin      # Door scanners re-scanning tickets
  locust -f locustfile.py --tags throughput   # Cached event listing
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string
from datetime import datetime, timezone, timedelta

from locust import HttpUser, task, between, tag, events

OVERSELL_CAPACITY = 10
PASSWORD = "loadtest-password"

# Shared state
OVERSELL_EVENT_ID = None
ORGANIZER_HEADERS = {}
SCANNED_PAYLOADS = []


def random_email(prefix: str = "load") -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return f"{prefix}_{suffix}@test.com"


def register_and_login(client, role: str) -> dict:
    email = random_email(role)
    client.post("/api/v1/auth/register", json={
        "email": email,
        "name": f"Load {role.title()}",
        "password": PASSWORD,
        "role": role,
    })
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    if resp.status_code != 200:
        return {}
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: oversell event with {OVERSELL_CAPACITY} places is created by the first fan")
    print("=" * 60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    if OVERSELL_EVENT_ID:
        print(f"\nVerify: SELECT COUNT(*) FROM tickets WHERE event_id = {OVERSELL_EVENT_ID};")
        print(f"Should be <= {OVERSELL_CAPACITY}\n")


def ensure_oversell_event(client) -> None:
    global OVERSELL_EVENT_ID, ORGANIZER_HEADERS
    if OVERSELL_EVENT_ID:
        return

    ORGANIZER_HEADERS = register_and_login(client, "organizer")
    future = (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()
    resp = client.post(
        "/api/v1/events/",
        json={
            "title": "Oversell Test Event",
            "description": f"{OVERSELL_CAPACITY} places only",
            "date": future,
            "location": "Test",
            "capacity": OVERSELL_CAPACITY,
        },
        headers=ORGANIZER_HEADERS,
    )
    if resp.status_code == 201:
        OVERSELL_EVENT_ID = resp.json()["id"]
        print(f"\nCreated event {OVERSELL_EVENT_ID} with {OVERSELL_CAPACITY} places\n")


class OversellUser(HttpUser):
    """
    TEST 1: Oversell - many fans, few places

    Run: locust -f locustfile.py --tags oversell -u 100 -r 50 --run-time 30s

    Every fan joins once. Expect exactly OVERSELL_CAPACITY 201s;
    everything else must be 409 CAPACITY_EXCEEDED or ALREADY_JOINED.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        ensure_oversell_event(self.client)
        self.headers = register_and_login(self.client, "fan")

    @tag("oversell")
    @task
    def join_limited_event(self):
        if not OVERSELL_EVENT_ID or not self.headers:
            return

        with self.client.post(
            "/api/v1/events/join",
            json={"event_id": OVERSELL_EVENT_ID},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                SCANNED_PAYLOADS.append(resp.json()["tickets"][0]["scan_payload"])
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: full, or this fan already holds a ticket
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ScannerUser(HttpUser):
    """
    TEST 2: Check-in - scanners at several doors scan the same tickets

    Run together with the oversell scenario:
      locust -f locustfile.py --tags oversell checkin -u 60 -r 20 --run-time 30s

    Each ticket must be admitted once; every later scan is 409.
    """
    wait_time = between(0.05, 0.2)

    @tag("checkin")
    @task
    def scan_ticket(self):
        if not SCANNED_PAYLOADS or not ORGANIZER_HEADERS:
            return

        with self.client.post(
            "/api/v1/events/checkin",
            json={"payload": random.choice(SCANNED_PAYLOADS)},
            headers=ORGANIZER_HEADERS,
            catch_response=True,
            name="/api/v1/events/checkin",
        ) as resp:
            if resp.status_code in (200, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 3: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        page = random.randint(1, 5)
        self.client.get(f"/api/v1/events/?page={page}&page_size=20",
            name="/api/v1/events/ [cached]")

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        if OVERSELL_EVENT_ID:
            self.client.get(f"/api/v1/events/{OVERSELL_EVENT_ID}", name="/api/v1/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 4: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register_and_login(self.client, "fan")

    def _expect(self, method, url, allowed, **kwargs):
        with self.client.request(method, url, catch_response=True, **kwargs) as resp:
            if resp.status_code in allowed:
                resp.success()
            else:
                resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_event(self):
        self._expect("POST", "/api/v1/events/join", [404],
            json={"event_id": 999999}, headers=self.headers)

    @tag("edge")
    @task
    def too_many_tickets(self):
        self._expect("POST", "/api/v1/events/create-order", [422],
            json={"event_id": 1, "quantity": 999}, headers=self.headers)

    @tag("edge")
    @task
    def forged_payment(self):
        self._expect("POST", "/api/v1/events/verify-payment", [400, 402, 404, 409],
            json={
                "event_id": 1,
                "quantity": 1,
                "order_id": "order_fake",
                "payment_id": "pay_fake",
                "signature": "0" * 64,
            },
            headers=self.headers)

    @tag("edge")
    @task
    def malformed_scan(self):
        self._expect("POST", "/api/v1/events/checkin", [400, 403],
            json={"payload": "not-a-ticket"}, headers=self.headers)

    @tag("edge")
    @task
    def malformed_json(self):
        self._expect("POST", "/api/v1/events/join", [422],
            data="not json at all", headers=self.headers)

    @tag("edge")
    @task
    def missing_auth(self):
        self._expect("POST", "/api/v1/events/join", [401], json={"event_id": 1})
