"""Project and environment scopes.

A scope is either a specific identifier or the wildcard covering every
identifier. The wildcard is its own type, so no real project or
environment name can ever collide with it.
"""

from dataclasses import dataclass
from typing import Final, TypeAlias


@dataclass(frozen=True, slots=True)
class Specific:
    """A single named project or environment."""

    id: str

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Scope identifier cannot be empty")

    def matches(self, candidate: str | None) -> bool:
        return candidate == self.id

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True, slots=True)
class All:
    """Every project or every environment, including future ones."""

    def matches(self, candidate: str | None) -> bool:
        return True

    def __str__(self) -> str:
        return "*"


Scope: TypeAlias = Specific | All

ALL_PROJECTS: Final[All] = All()
ALL_ENVIRONMENTS: Final[All] = All()


def coerce_scope(value: "Scope | str | None") -> Scope | None:
    """Turn caller input into a scope.

    Plain strings name a specific scope. ``None`` and blank strings mean
    no scope was supplied at all, which is different from the wildcard.
    """
    if value is None or isinstance(value, (Specific, All)):
        return value
    if not value.strip():
        return None
    return Specific(value)


def to_column(scope: Scope | None) -> str | None:
    """Storage encoding: the wildcard (and an absent scope) is NULL."""
    if isinstance(scope, Specific):
        return scope.id
    return None


def from_column(value: str | None) -> Scope:
    """Inverse of :func:`to_column`; NULL reads back as the wildcard."""
    if value is None:
        return All()
    return Specific(value)
