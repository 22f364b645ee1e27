"""
Zone Simulator: external telemetry producer for demos and load testing.

Emulates substations grouped into zones and posts to the gateway over HTTP,
exactly like a field producer would:
  POST /telemetry  {zoneId, zoneName, timestamp, substations: [...]}
  POST /logs       one entry per substation reporting warning / fault

Each substation keeps a stable base profile (seeded by "zone::substation")
and drifts smoothly around it. Randomness stays here; the decision engine
never sees anything but the posted payloads.

Run: python -m gridguard.services.zone_simulator
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from dataclasses import dataclass, field

import httpx

from gridguard.config import settings
from gridguard.core.timeutil import now_iso

logger = logging.getLogger("gridguard.zone_simulator")

SQRT3 = math.sqrt(3)

DEMO_ZONES = [
    {"id": "zone1", "name": "Kasaragod Zone", "substations": [
        {"id": "z1ss1", "name": "Kasaragod Town SS", "coords": [12.517, 75.001]},
        {"id": "z1ss2", "name": "Kasaragod North SS", "coords": [12.535, 75.012]},
    ]},
    {"id": "zone2", "name": "Kannur Zone", "substations": [
        {"id": "z2ss1", "name": "Kannur City SS", "coords": [11.874, 75.370]},
        {"id": "z2ss2", "name": "Thalassery SS", "coords": [11.748, 75.492]},
        {"id": "z2ss3", "name": "Payyannur SS", "coords": [12.101, 75.205]},
    ]},
    {"id": "zone3", "name": "Kozhikode Zone", "substations": [
        {"id": "z3ss1", "name": "Kozhikode City SS", "coords": [11.258, 75.780]},
        {"id": "z3ss2", "name": "Vadakara SS", "coords": [11.609, 75.583]},
    ]},
]


@dataclass
class _SubstationState:
    base_load: float     # kW
    pf: float
    single_v: float
    three_v: float
    load_kw: float
    phase: float = field(default=0.0)


def classify(single_v: float, three_v: float, load_kw: float) -> str:
    """ok / warning / fault from LT voltage and load bounds."""
    if single_v < 205 or single_v > 250 or three_v < 385 or three_v > 415 or load_kw > 65:
        return "fault"
    if single_v < 215 or single_v > 245 or three_v < 390 or three_v > 410 or load_kw > 55:
        return "warning"
    return "ok"


class ZoneSimulator:
    """Posts synthetic zone telemetry to the gateway every *interval* seconds."""

    def __init__(
        self,
        base_url: str,
        zones: list[dict] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        interval: float = 5.0,
        timeout: float = 3.0,
        fault_rate: float = 0.05,
        warning_rate: float = 0.10,
        rng: random.Random | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.zones = zones if zones is not None else DEMO_ZONES
        self.interval = interval
        self.fault_rate = fault_rate
        self.warning_rate = warning_rate
        self._rng = rng or random.Random()
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._state: dict[str, _SubstationState] = {}
        self._running = False

    async def start(self) -> None:
        self._running = True
        logger.info("ZoneSimulator started, %d zones -> %s every %.1fs",
                    len(self.zones), self.base_url, self.interval)
        while self._running:
            await self.tick()
            await asyncio.sleep(self.interval)

    async def stop(self) -> None:
        self._running = False
        if self._owns_client:
            await self._client.aclose()
        logger.info("ZoneSimulator stopped")

    # ------------------------------------------------------------------
    async def tick(self) -> None:
        for zone in self.zones:
            await self.send_zone(zone)

    async def send_zone(self, zone: dict) -> bool:
        """Post one telemetry payload plus warning/fault logs. Never raises."""
        payload = self.build_payload(zone)
        try:
            resp = await self._client.post(f"{self.base_url}/telemetry", json=payload)
            resp.raise_for_status()
            for sub in payload["substations"]:
                if sub["status"] in ("fault", "warning"):
                    resp = await self._client.post(f"{self.base_url}/logs", json={
                        "zone": zone["name"],
                        "zoneId": zone["id"],
                        "substation": sub["name"],
                        "ssId": sub["id"],
                        "status": sub["status"],
                        "message": f"{sub['status'].upper()} at {sub['name']}",
                        "time": now_iso(),
                    })
                    resp.raise_for_status()
            logger.debug("Sent telemetry and logs for %s", zone["id"])
            return True
        except httpx.HTTPError as exc:
            logger.error("Send failed for %s: %s", zone["id"], exc)
            return False

    def build_payload(self, zone: dict) -> dict:
        return {
            "zoneId": zone["id"],
            "zoneName": zone["name"],
            "timestamp": now_iso(),
            "substations": [self._reading(zone, s) for s in zone["substations"]],
        }

    # ------------------------------------------------------------------
    def _profile(self, key: str) -> _SubstationState:
        st = self._state.get(key)
        if st is None:
            seeded = random.Random(key)
            base_load = round(2 + seeded.random() * 61, 1)   # 2–63 kW
            st = _SubstationState(
                base_load=base_load,
                pf=0.92 + seeded.random() * 0.06,
                single_v=230 + (seeded.random() - 0.5) * 3,
                three_v=400 + (seeded.random() - 0.5) * 6,
                load_kw=base_load * (0.85 + seeded.random() * 0.3),
                phase=seeded.random() * 10,
            )
            self._state[key] = st
        return st

    def _reading(self, zone: dict, sub: dict) -> dict:
        st = self._profile(f"{zone['id']}::{sub['id']}")
        noise = self._rng.random

        t = time.time() / 60
        load_var = 1 + 0.22 * math.sin(t + st.phase) + (noise() - 0.5) * 0.08
        st.load_kw = max(1.5, min(70, st.load_kw * 0.85 + st.base_load * load_var * 0.15))
        st.single_v = max(200, min(255, st.single_v * 0.97 + 230 * 0.03 + (noise() - 0.5) * 2.5))
        st.three_v = max(380, min(420, st.three_v * 0.97 + 400 * 0.03 + (noise() - 0.5) * 4))

        p_w = st.load_kw * 1000
        status = classify(st.single_v, st.three_v, st.load_kw)
        r = noise()
        if r < self.fault_rate:
            status = "fault"
        elif r < self.fault_rate + self.warning_rate and status == "ok":
            status = "warning"

        return {
            "id": sub["id"],
            "name": sub["name"],
            "coords": sub.get("coords"),
            "singlePhaseVoltage": round(st.single_v, 1),
            "singlePhaseCurrent": round(p_w / (st.single_v * st.pf), 1),
            "threePhaseVoltage": round(st.three_v, 1),
            "threePhaseCurrent": round(p_w / (SQRT3 * st.three_v * st.pf), 1),
            "load": round(st.load_kw, 1),
            "status": status,
        }


async def _main() -> None:
    sim = ZoneSimulator(
        settings.SIM_API_BASE,
        interval=settings.SIM_INTERVAL,
        timeout=settings.SIM_TIMEOUT,
    )
    try:
        await sim.start()
    finally:
        await sim.stop()


if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        pass
