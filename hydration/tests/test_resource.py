"""
Tests for the resource lattice and field slots.
"""

import pytest

from hydration.core.api_error import ApiError, ErrorKind, classify
from hydration.core.errors import InvalidTransitionError
from hydration.core.resource import (
    CoarseState,
    Failed,
    Loaded,
    Loading,
    NotAsked,
    begin,
    merge,
    to_coarse_state,
    value_or,
)
from hydration.core.state import Slot

ERR = ApiError(status=500, code="INTERNAL", message="boom")


def test_coarse_state_projection():
    assert to_coarse_state(NotAsked()) == CoarseState.NOT_ASKED
    assert to_coarse_state(Loading()) == CoarseState.LOADING
    assert to_coarse_state(Loaded([1])) == CoarseState.LOADED
    assert to_coarse_state(Failed(ERR)) == CoarseState.FAILED


def test_terminal_results_replace_loading():
    assert merge(Loading(), Loaded(5)) == Loaded(5)
    assert merge(Loading(), Failed(ERR)) == Failed(ERR)


@pytest.mark.parametrize("current", [NotAsked(), Loaded(1), Failed(ERR)])
def test_merge_requires_loading(current):
    """A response never lands on a field that has no request in flight."""
    with pytest.raises(InvalidTransitionError):
        merge(current, Loaded(2))


def test_merge_rejects_non_terminal_incoming():
    with pytest.raises(InvalidTransitionError):
        merge(Loading(), NotAsked())


@pytest.mark.parametrize("current", [NotAsked(), Loading(), Loaded(1), Failed(ERR)])
def test_begin_always_loading(current):
    assert begin(current) == Loading()


def test_value_or():
    assert value_or(Loaded(3), 0) == 3
    assert value_or(Failed(ERR), 0) == 0


def test_classify():
    assert classify(ApiError(401, "AUTH_REQUIRED")) == ErrorKind.AUTH_REQUIRED
    assert classify(ApiError(403, "FORBIDDEN")) == ErrorKind.FORBIDDEN
    assert classify(ApiError(404, "NOT_FOUND")) == ErrorKind.NETWORK_OR_SERVER
    assert classify(ApiError.network("offline")) == ErrorKind.NETWORK_OR_SERVER
    assert ApiError.network("offline").status == 0


def test_slot_records_scope():
    slot = Slot().start(scope=3)

    assert slot.resource == Loading()
    assert slot.scope == 3
    assert slot.resolve(("a",)).value == ("a",)


def test_slot_refuse_restores_previous_value():
    """403 leaves the field as it was before the request."""
    slot = Slot().start(scope=1).resolve(("old",))
    refused = slot.start(scope=2).refuse()

    assert refused.resource == Loaded(("old",))
    assert refused.refused is True
    assert refused.scope == 2


def test_slot_refuse_from_never_loaded_is_not_asked():
    refused = Slot().start().refuse()

    assert refused.resource == NotAsked()
    assert refused.refused is True


def test_slot_restart_keeps_original_prior():
    """Restarting an in-flight field must not lose the value before it."""
    slot = Slot().start().resolve(("v1",)).start().start()

    assert slot.refuse().resource == Loaded(("v1",))


def test_slot_new_request_clears_refusal():
    slot = Slot().start(scope=1).refuse().start(scope=1)

    assert slot.refused is False
    assert slot.resource == Loading()
