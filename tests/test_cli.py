"""Tests for the command line interface."""

from unittest.mock import AsyncMock

import pytest
from typer.testing import CliRunner

from lovesync_events.cli import main as cli
from lovesync_events.core.event_model import WebScrapeCandidate
from lovesync_events.core.orchestrator import AggregationOrchestrator, OrchestratorConfig

runner = CliRunner()


@pytest.fixture
def orchestrator(store, tomorrow_evening, monkeypatch, stub_adapter):
    def factory(source_id):
        return stub_adapter(source_id, [WebScrapeCandidate(title=f"{source_id} weekly gig", start=tomorrow_evening)])

    orchestrator = AggregationOrchestrator(
        OrchestratorConfig(),
        store,
        adapter_factory=factory,
        sleep=AsyncMock(),
    )
    monkeypatch.setattr(cli, "build_orchestrator", lambda dry_run=False: orchestrator)
    return orchestrator


def test_batch_prints_totals(orchestrator):
    result = runner.invoke(cli.app, ["batch", "--city", "Mumbai", "--city", "Atlantis"])

    assert result.exit_code == 0
    assert "Inserted: 3, Processed: 1, Failed: 1" in result.output


def test_master_requires_country(orchestrator):
    result = runner.invoke(cli.app, ["master", "--mode", "single"])

    assert result.exit_code == 1
    assert "country is required" in result.output


def test_master_rejects_unknown_mode(orchestrator):
    result = runner.invoke(cli.app, ["master", "--mode", "everything"])

    assert result.exit_code != 0


def test_fetch_lists_events(orchestrator, store):
    result = runner.invoke(
        cli.app,
        ["fetch", "--lat", "19.076", "--lng", "72.8777", "--city", "Mumbai", "--source", "web"],
    )

    assert result.exit_code == 0
    assert "new events: 1" in result.output
    assert len(store.events) == 1


def test_cleanup(orchestrator):
    result = runner.invoke(cli.app, ["cleanup"])

    assert result.exit_code == 0
    assert "Deleted 0 expired events" in result.output


def test_version():
    result = runner.invoke(cli.app, ["version"])

    assert result.exit_code == 0
    assert "Version:" in result.output
