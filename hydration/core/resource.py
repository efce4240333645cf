"""
Resource lattice: the four-state wrapper used for every server-backed field.

Legal transitions:
    NotAsked -> Loading -> {Loaded, Failed}
    Loaded | Failed -> Loading   (explicit new request only)

A resource never falls back to NotAsked on its own.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from .api_error import ApiError
from .errors import InvalidTransitionError

T = TypeVar("T")


@dataclass(frozen=True)
class NotAsked:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Loaded(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failed:
    error: ApiError


Resource = Union[NotAsked, Loading, Loaded, Failed]


class CoarseState(str, Enum):
    NOT_ASKED = "not_asked"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


def to_coarse_state(resource: Resource) -> CoarseState:
    """Project a resource to its payload-free state, for the planner."""
    if isinstance(resource, NotAsked):
        return CoarseState.NOT_ASKED
    if isinstance(resource, Loading):
        return CoarseState.LOADING
    if isinstance(resource, Loaded):
        return CoarseState.LOADED
    if isinstance(resource, Failed):
        return CoarseState.FAILED
    raise InvalidTransitionError(f"Not a resource: {resource!r}")


def begin(current: Resource) -> Resource:
    """
    Transition to Loading for an explicit new request.

    Allowed from every state; Loading stays Loading.
    """
    to_coarse_state(current)
    return Loading()


def merge(current: Resource, incoming: Resource) -> Resource:
    """
    Overwrite a field with a response.

    Loaded or Failed always replaces Loading. Stale responses must have been
    rejected by the staleness guard before this is called.

    Raises:
        InvalidTransitionError: If the field was not Loading, or if the
            incoming value is not terminal
    """
    if not isinstance(incoming, (Loaded, Failed)):
        raise InvalidTransitionError(
            f"Response must be Loaded or Failed, got {type(incoming).__name__}"
        )
    if not isinstance(current, Loading):
        raise InvalidTransitionError(
            f"Cannot apply {type(incoming).__name__} to a {type(current).__name__} resource"
        )
    return incoming


def value_or(resource: Resource, default: Any) -> Any:
    if isinstance(resource, Loaded):
        return resource.value
    return default
