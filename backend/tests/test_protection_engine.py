"""Decision engine: fault predicate, at-most-once isolation, protection control."""

import threading

import pytest

from gridguard.core.errors import ValidationError
from gridguard.services.protection_engine import (
    MSG_AUTO_ISOLATION,
    MSG_SIMULATED_ISOLATION,
    ProtectionEngine,
    is_fault,
)
from gridguard.services.protection_store import ProtectionStore


# ===========================================================================
# Fault predicate
# ===========================================================================

class TestIsFault:
    @pytest.mark.parametrize("payload", [
        {"status": "broken"},
        {"current": 0},
        {"current": 0.0},
        {"breakDetected": True},
    ])
    def test_each_signal_triggers(self, payload):
        assert is_fault(payload) is True

    @pytest.mark.parametrize("payload", [
        {"status": "ok", "current": 5},
        {},
        {"status": "fault"},
        {"breakDetected": "true"},
        {"breakDetected": 1},
        {"current": False},
        {"current": "0"},
    ])
    def test_non_fault_payloads(self, payload):
        assert is_fault(payload) is False


# ===========================================================================
# Ingest
# ===========================================================================

class TestIngest:
    def test_requires_zone_id(self, engine, protection_store):
        with pytest.raises(ValidationError):
            engine.ingest(None, {"status": "ok"})
        with pytest.raises(ValidationError):
            engine.ingest("", {"status": "ok"})
        assert protection_store.get_all() == {}
        assert engine.snapshots() == {}

    def test_first_sight_creates_default_record(self, engine, protection_store):
        result = engine.ingest("zone1", {"status": "ok"})
        assert result.stored is True
        rec = protection_store.get("zone1")
        assert rec is not None
        assert rec.enabled is False
        assert rec.isolated is False
        assert rec.last_action_at is None
        # persisted immediately
        assert ProtectionStore(protection_store.path).get("zone1") is not None

    def test_no_record_before_zone_is_seen(self, engine, protection_store):
        engine.ingest("zone1", {"status": "ok"})
        assert protection_store.get("zone2") is None

    def test_snapshot_is_overwritten_not_merged(self, engine):
        engine.ingest("zone1", {"zoneId": "zone1", "status": "ok", "current": 5})
        engine.ingest("zone1", {"zoneId": "zone1", "load": 12.5})
        snap = engine.snapshots()["zone1"]
        assert snap["load"] == 12.5
        assert "status" not in snap
        assert "current" not in snap
        assert "receivedAt" in snap

    def test_fault_without_opt_in_does_not_isolate(self, engine, log_store, protection_store):
        result = engine.ingest("zone1", {"status": "broken"})
        assert result.action is None
        assert protection_store.get("zone1").isolated is False
        assert len(log_store) == 0

    def test_isolates_enabled_zone_on_fault(self, engine, log_store, protection_store, clock):
        engine.set_protection("zone1", True)
        result = engine.ingest("zone1", {"breakDetected": True, "substation": "z1ss1"})

        assert result.action is not None
        assert result.state.isolated is True
        rec = protection_store.get("zone1")
        assert rec.isolated is True
        assert rec.last_action_at == "2026-03-15T12:00:00.000Z"

        [entry] = log_store.query()
        assert entry.zone == "zone1"
        assert entry.substation == "z1ss1"
        assert entry.status == "fault"
        assert entry.message == MSG_AUTO_ISOLATION
        assert entry.time == "2026-03-15T12:00:00.000Z"

    def test_substation_defaults_to_none(self, engine, log_store):
        engine.set_protection("zone1", True)
        engine.ingest("zone1", {"current": 0})
        assert log_store.query()[0].substation is None

    def test_at_most_once_isolation(self, engine, log_store, protection_store, clock):
        engine.set_protection("zone1", True)
        engine.ingest("zone1", {"status": "broken"})
        clock.advance(seconds=5)
        second = engine.ingest("zone1", {"breakDetected": True})

        assert second.action is None
        isolations = [e for e in log_store.query() if e.message.startswith("Auto-isolation triggered")]
        assert len(isolations) == 1
        rec = protection_store.get("zone1")
        assert rec.isolated is True
        assert rec.last_action_at == "2026-03-15T12:00:00.000Z"

    def test_healthy_telemetry_does_not_clear_isolation(self, engine, protection_store):
        engine.set_protection("zone1", True)
        engine.ingest("zone1", {"status": "broken"})
        engine.ingest("zone1", {"status": "ok", "current": 7})
        assert protection_store.get("zone1").isolated is True

    def test_isolation_is_durable(self, engine, protection_store, log_store):
        engine.set_protection("zone1", True)
        engine.ingest("zone1", {"status": "broken"})
        assert ProtectionStore(protection_store.path).get("zone1").isolated is True
        assert log_store.path.exists()

    def test_concurrent_faults_isolate_once(self, engine, log_store, protection_store):
        engine.set_protection("zone1", True)
        barrier = threading.Barrier(8)

        def report():
            barrier.wait()
            engine.ingest("zone1", {"status": "broken"})

        threads = [threading.Thread(target=report) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(log_store.query()) == 1
        assert protection_store.get("zone1").isolated is True


# ===========================================================================
# Simulated break
# ===========================================================================

class TestSimulateBreak:
    def test_uses_the_same_decision(self, engine, log_store):
        engine.set_protection("zone2", True)
        result = engine.simulate_break("zone2", "z2ss3")
        assert result.state.isolated is True
        [entry] = log_store.query()
        assert entry.message == MSG_SIMULATED_ISOLATION
        assert entry.substation == "z2ss3"

    def test_updates_snapshot(self, engine):
        engine.simulate_break("zone2")
        snap = engine.snapshots()["zone2"]
        assert snap["breakDetected"] is True
        assert snap["status"] == "broken"
        assert snap["zoneId"] == "zone2"

    def test_respects_at_most_once(self, engine, log_store):
        engine.set_protection("zone2", True)
        engine.ingest("zone2", {"status": "broken"})
        engine.simulate_break("zone2")
        assert len(log_store.query()) == 1

    def test_not_enabled_is_noop(self, engine, log_store, protection_store):
        result = engine.simulate_break("zone2")
        assert result.action is None
        assert protection_store.get("zone2").isolated is False
        assert len(log_store) == 0

    def test_requires_zone_id(self, engine):
        with pytest.raises(ValidationError):
            engine.simulate_break(None)


# ===========================================================================
# Protection control
# ===========================================================================

class TestSetProtection:
    def test_creates_record(self, engine, protection_store):
        rec = engine.set_protection("zone9", True)
        assert rec.enabled is True
        assert rec.isolated is False
        assert rec.last_action_at is None
        assert ProtectionStore(protection_store.path).get("zone9").enabled is True

    def test_disable_clears_isolation(self, engine, protection_store, clock):
        engine.set_protection("zone1", True)
        engine.ingest("zone1", {"status": "broken"})
        clock.advance(minutes=10)

        rec = engine.set_protection("zone1", False)
        assert rec.enabled is False
        assert rec.isolated is False
        assert rec.last_action_at == "2026-03-15T12:10:00.000Z"
        assert protection_store.get("zone1").isolated is False

    def test_reenable_allows_new_isolation(self, engine, log_store):
        engine.set_protection("zone1", True)
        engine.ingest("zone1", {"status": "broken"})
        engine.set_protection("zone1", False)
        engine.set_protection("zone1", True)
        engine.ingest("zone1", {"status": "broken"})
        assert len(log_store.query()) == 2

    def test_enable_does_not_evaluate_telemetry(self, engine, protection_store):
        engine.ingest("zone1", {"status": "broken"})
        rec = engine.set_protection("zone1", True)
        assert rec.isolated is False

    def test_requires_zone_id(self, engine):
        with pytest.raises(ValidationError):
            engine.set_protection(None, True)


class TestRecordCommand:
    def test_journals_command(self, engine, log_store, protection_store):
        entry = engine.record_command("zone3", "open_breaker")
        assert entry.status == "command"
        assert "open_breaker" in entry.message
        assert log_store.query() == [entry]
        assert protection_store.get("zone3") is None
