"""
Tests for replay determinism.

Critical: replaying the same messages must produce identical models and
identical effects across runs.
"""

from hydration.core.api_error import ApiError
from hydration.core.canonical import canonical_json_str
from hydration.core.msgs import (
    MeFetched,
    MemberTasksFetched,
    MemberTaskTypesFetched,
    ProjectSelected,
    ProjectsFetched,
    SearchDebounceFired,
    SearchInput,
    ShowToast,
    ToastTick,
    UrlChanged,
)
from hydration.core.state import Model
from hydration.replay import replay
from hydration.tests.factories import ALPHA, BETA, MEMBER, task, task_type

SESSION = [
    UrlChanged("/app/pool"),
    MeFetched(token=1, result=MEMBER),
    ProjectsFetched(token=1, result=[ALPHA, BETA]),
    MemberTasksFetched(token=1, result=[task(2, 2)], key=2),
    MemberTaskTypesFetched(token=1, result=ApiError(500, "INTERNAL"), key=1),
    MemberTasksFetched(token=1, result=[task(1, 1)], key=1),
    MemberTaskTypesFetched(token=1, result=[task_type(2, 2)], key=2),
    ProjectSelected(2),
    SearchInput("task"),
    SearchDebounceFired(1),
    ShowToast("Saved", "success"),
    ToastTick(250),
]


def test_replay_determinism_100_runs():
    """Replay same messages 100 times must produce identical state."""
    models = set()
    effects = set()
    for _ in range(100):
        result = replay(SESSION)
        models.add(canonical_json_str(result.model))
        effects.add(canonical_json_str(result.effects))

    assert len(models) == 1
    assert len(effects) == 1


def test_replay_result():
    result = replay(SESSION)

    assert result.applied == len(SESSION)
    assert result.model.core.route.project_id == 2
    assert result.model.member.tasks.scope == (2,)
    assert result.model.member.search_query == "task"


def test_replay_partial():
    """Replay stopping after N messages matches replaying the prefix."""
    partial = replay(SESSION, upto=6)
    prefix = replay(SESSION[:6])

    assert partial.applied == 6
    assert canonical_json_str(partial.model) == canonical_json_str(prefix.model)
    assert partial.effects == prefix.effects


def test_replay_from_model():
    """Replay can resume from a model produced by an earlier replay."""
    first = replay(SESSION[:4])
    rest = replay(SESSION[4:], model=first.model)
    whole = replay(SESSION)

    assert canonical_json_str(rest.model) == canonical_json_str(whole.model)


def test_replay_empty():
    """Replay of nothing returns the initial model."""
    result = replay([])

    assert result.applied == 0
    assert result.effects == ()
    assert result.model == Model.initial()
