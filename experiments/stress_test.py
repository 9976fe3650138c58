#!/usr/bin/env python3
"""
Stress test against a running Event Ticketing API.

Phase 1: N fans join a free event with few places at the same moment.
Phase 2: two door scanners scan every issued ticket at the same moment.

Pass criteria: issued tickets <= capacity, and every ticket admitted once.
"""

import asyncio
import time
from collections import Counter
from datetime import datetime, timezone, timedelta
from typing import Optional

import aiohttp

API_URL = "http://localhost:8000"
CONCURRENT_FANS = 50
CAPACITY = 10
PASSWORD = "stress-password"


class StressTest:
    def __init__(self):
        self.run_id = int(time.time())
        self.event_id: Optional[int] = None
        self.join_statuses: Counter = Counter()
        self.scan_statuses: Counter = Counter()
        self.payloads: list[str] = []
        self.response_times: list[float] = []

    async def register_and_login(
        self, session: aiohttp.ClientSession, label: str, role: str
    ) -> Optional[dict]:
        email = f"stress_{label}_{self.run_id}@test.com"
        await session.post(f"{API_URL}/api/v1/auth/register", json={
            "email": email,
            "name": f"Stress {label}",
            "password": PASSWORD,
            "role": role,
        })
        async with session.post(f"{API_URL}/api/v1/auth/login", json={
            "email": email,
            "password": PASSWORD,
        }) as resp:
            if resp.status != 200:
                return None
            data = await resp.json()
            return {"Authorization": f"Bearer {data['access_token']}"}

    async def create_event(self, session: aiohttp.ClientSession, headers: dict) -> None:
        future_date = (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()
        async with session.post(
            f"{API_URL}/api/v1/events/",
            json={
                "title": f"Stress Test Event {self.run_id}",
                "description": "Concurrent issuance",
                "date": future_date,
                "location": "Test Venue",
                "capacity": CAPACITY,
            },
            headers=headers,
        ) as resp:
            if resp.status == 201:
                self.event_id = (await resp.json())["id"]
                print(f"Created event {self.event_id} with {CAPACITY} places")

    async def join(self, session: aiohttp.ClientSession, headers: dict) -> None:
        start = time.perf_counter()
        try:
            async with session.post(
                f"{API_URL}/api/v1/events/join",
                json={"event_id": self.event_id},
                headers=headers,
            ) as resp:
                self.response_times.append((time.perf_counter() - start) * 1000)
                body = await resp.json()
                if resp.status == 201:
                    self.payloads.append(body["tickets"][0]["scan_payload"])
                    self.join_statuses["issued"] += 1
                else:
                    self.join_statuses[body.get("error", str(resp.status))] += 1
        except aiohttp.ClientError as e:
            self.join_statuses["client_error"] += 1
            print(f"join error: {e}")

    async def scan(self, session: aiohttp.ClientSession, headers: dict, payload: str) -> None:
        async with session.post(
            f"{API_URL}/api/v1/events/checkin",
            json={"payload": payload},
            headers=headers,
        ) as resp:
            body = await resp.json()
            self.scan_statuses["admitted" if resp.status == 200 else body.get("error", str(resp.status))] += 1

    async def run(self) -> bool:
        print(f"\n{'=' * 60}")
        print(f"STRESS TEST: {CONCURRENT_FANS} fans -> {CAPACITY} places")
        print(f"{'=' * 60}\n")

        async with aiohttp.ClientSession() as session:
            organizer = await self.register_and_login(session, "organizer", "organizer")
            if not organizer:
                print("Failed to create organizer")
                return False
            await self.create_event(session, organizer)
            if not self.event_id:
                print("Failed to create event")
                return False

            fans = await asyncio.gather(*(
                self.register_and_login(session, f"fan{i}", "fan") for i in range(CONCURRENT_FANS)
            ))
            fans = [h for h in fans if h]
            print(f"Registered {len(fans)} fans\n")

            started = time.perf_counter()
            await asyncio.gather(*(self.join(session, headers) for headers in fans))
            print(f"Phase 1 took {time.perf_counter() - started:.2f}s: {dict(self.join_statuses)}")

            await asyncio.gather(*(
                self.scan(session, organizer, payload)
                for payload in self.payloads
                for _ in range(2)
            ))
            print(f"Phase 2: {dict(self.scan_statuses)}")

        if self.response_times:
            times = sorted(self.response_times)
            print(f"\nJoin latency: avg {sum(times) / len(times):.0f}ms, "
                  f"p95 {times[int(len(times) * 0.95)]:.0f}ms")

        issued = self.join_statuses["issued"]
        admitted = self.scan_statuses["admitted"]
        ok = issued <= CAPACITY and admitted == issued
        print("\n" + "=" * 60)
        print(f"{'PASS' if ok else 'FAIL'}: issued {issued}/{CAPACITY}, admitted {admitted}/{issued}")
        print("=" * 60 + "\n")
        return ok


if __name__ == "__main__":
    passed = asyncio.run(StressTest().run())
    raise SystemExit(0 if passed else 1)
