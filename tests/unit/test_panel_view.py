"""Tests for the persistent panel adapter."""

from __future__ import annotations

from conftest import make_finding

from riskscan.events import EventBus, ScanningEnded, ScanningStarted
from riskscan.scanner.models import ScanState
from riskscan.scanner.store import FindingStore
from riskscan.storage.repos import StateRepo
from riskscan.views.panel import FINDINGS_KEY, STATE_KEY, PanelAdapter


def _setup(db):
    bus = EventBus()
    repo = StateRepo(db)
    return bus, repo, FindingStore(bus), PanelAdapter(bus, repo)


def test_every_mutation_written_to_both_keys(run, db):
    bus, repo, store, panel = _setup(db)
    run(panel.initialize())

    run(store.clear())
    run(bus.publish(ScanningStarted(state=ScanState(scanning=True))))
    assert run(repo.get(STATE_KEY)) == {"scanning": True, "findings": []}

    run(store.add_all([make_finding()]))
    stored = run(repo.get(STATE_KEY))
    assert stored["scanning"] is True
    assert stored["findings"] == [make_finding().to_dict()]
    assert run(repo.get(FINDINGS_KEY)) == stored["findings"]

    run(bus.publish(ScanningEnded(state=ScanState(False, store.findings))))
    assert run(repo.get(STATE_KEY))["scanning"] is False
    assert panel.state == ScanState(False, store.findings)


def test_rehydration_reproduces_persisted_state(run, db):
    bus, _, store, panel = _setup(db)
    run(panel.initialize())
    run(store.add_all([make_finding("A"), make_finding("B", lines=(3,))]))
    run(bus.publish(ScanningEnded(state=ScanState(False, store.findings))))
    persisted = panel.state

    # Fresh process: new bus, new adapter, same durable store
    fresh = PanelAdapter(EventBus(), StateRepo(db))
    assert fresh.state == ScanState()
    assert run(fresh.initialize()) == persisted
    assert fresh.state == persisted


def test_rehydration_is_idempotent(run, db):
    bus, repo, store, panel = _setup(db)
    run(panel.initialize())
    run(store.add_all([make_finding()]))
    first = run(PanelAdapter(EventBus(), repo).initialize())
    second = run(PanelAdapter(EventBus(), repo).initialize())
    assert first == second


def test_falls_back_to_findings_only_key(run, db):
    repo = StateRepo(db)
    run(repo.set(FINDINGS_KEY, [make_finding().to_dict()]))

    panel = PanelAdapter(EventBus(), repo)
    state = run(panel.initialize())
    assert state == ScanState(scanning=False, findings=(make_finding(),))


def test_unreadable_state_ignored(run, db):
    repo = StateRepo(db)
    run(repo.set(STATE_KEY, {"scanning": False, "findings": [{"filename": "x"}]}))

    panel = PanelAdapter(EventBus(), repo)
    assert run(panel.initialize()) == ScanState()
    assert panel.initialized


def test_empty_store_initializes_empty(run, db):
    panel = PanelAdapter(EventBus(), StateRepo(db))
    assert run(panel.initialize()) == ScanState()


def test_render_lists_findings_in_order(run, db):
    from rich.console import Console

    _, _, store, panel = _setup(db)
    run(store.add_all([make_finding("Zeta"), make_finding("Alpha")]))

    console = Console(record=True, width=160)
    console.print(panel.render())
    out = console.export_text()
    assert out.index("Zeta") < out.index("Alpha")


def test_reset_is_persisted_as_scanning(run, db):
    bus, repo, store, panel = _setup(db)
    run(panel.initialize())
    run(store.add_all([make_finding()]))
    run(bus.publish(ScanningEnded(state=ScanState(False, store.findings))))

    run(store.clear())

    assert run(repo.get(STATE_KEY)) == {"scanning": True, "findings": []}
    assert run(repo.get(FINDINGS_KEY)) == []
