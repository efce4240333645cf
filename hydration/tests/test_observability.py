"""
Tests for structured logging and Prometheus metrics.
"""

import json
import logging

import pytest

from hydration.core.msgs import ProjectSelected
from shell_runtime import metrics
from shell_runtime.api import Fixture, FixtureApi
from shell_runtime.logging_config import get_logger, setup_logging
from shell_runtime.navigation import MemoryNavigator
from shell_runtime.runtime import Runtime
from hydration.tests.factories import ALPHA, BETA, MEMBER, task


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_logs_carry_trace_id(capsys, restore_root_logger):
    setup_logging(level="INFO", fmt="json")

    get_logger("hydration.test", trace_id="msg-7").info("Applied UrlChanged")
    logging.getLogger("hydration.plain").info("No trace")

    lines = [json.loads(line) for line in capsys.readouterr().err.splitlines()]
    assert lines[0]["message"] == "Applied UrlChanged"
    assert lines[0]["trace_id"] == "msg-7"
    assert lines[0]["level"] == "INFO"
    assert lines[0]["logger"] == "hydration.test"
    assert lines[1]["trace_id"] == "N/A"


def test_level_filters(capsys, restore_root_logger):
    setup_logging(level="WARNING", fmt="text")

    get_logger("hydration.test").info("hidden")
    get_logger("hydration.test").warning("shown")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err
    assert "[trace_id=N/A]" in err


def test_runtime_counts_stale_discards():
    metrics.init_metrics()
    registry = metrics.REGISTRY

    def stale():
        return registry.get_sample_value(
            "hydration_stale_discards_total", {"stream": "member_refresh"}
        ) or 0.0

    before = stale()
    api = FixtureApi(Fixture(
        me=MEMBER,
        projects=[ALPHA, BETA],
        tasks={1: [task(1, 1)], 2: [task(2, 2)]},
        latency_ms={"tasks:1": 100, "task_types:1": 100},
    ))
    runtime = Runtime(api, MemoryNavigator("/app/pool?project=1"))
    runtime.open("/app/pool?project=1")
    runtime.send(ProjectSelected(2), delay_ms=10)
    runtime.run()

    assert stale() - before == 2
    assert registry.get_sample_value(
        "hydration_fetches_total", {"request": "ListProjectTasks"}
    ) >= 2


def test_tracking_is_noop_before_init(monkeypatch):
    monkeypatch.setattr(metrics, "FETCHES_TOTAL", None)
    monkeypatch.setattr(metrics, "MESSAGES_TOTAL", None)

    metrics.track_fetch("GetMe")
    with metrics.track_dispatch("UrlChanged"):
        pass
