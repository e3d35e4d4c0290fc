"""Set difference between observed and desired access tuples."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from planaccess.domain.model import AccessTuple


@dataclass(frozen=True, slots=True)
class AccessDiff:
    to_delete: frozenset[AccessTuple] = field(default_factory=frozenset)
    to_create: frozenset[AccessTuple] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.to_delete and not self.to_create


class DiffAccess(Protocol):
    def __call__(
        self,
        observed: Iterable[AccessTuple],
        desired: Iterable[AccessTuple],
    ) -> AccessDiff: ...


def diff_access(
    observed: Iterable[AccessTuple],
    desired: Iterable[AccessTuple],
) -> AccessDiff:
    """Tuples granted but not wanted are deleted, wanted but not granted are created."""

    observed_set = frozenset(observed)
    desired_set = frozenset(desired)
    return AccessDiff(
        to_delete=observed_set - desired_set,
        to_create=desired_set - observed_set,
    )
