"""RACI role labels and the validated user-id set used for consulted/informed."""
import enum
from typing import Any, Iterable, Iterator, Optional

from .errors import InvalidRaciIdsError


class RaciRole(str, enum.Enum):
    """RACI role enum. Derived per (entity, user) pair, never stored as a label."""

    ACCOUNTABLE = "accountable"
    RESPONSIBLE = "responsible"
    CONSULTED = "consulted"
    INFORMED = "informed"


# Resolution order used when a list of roles is rendered
RACI_ROLE_ORDER: list[RaciRole] = [
    RaciRole.ACCOUNTABLE,
    RaciRole.RESPONSIBLE,
    RaciRole.CONSULTED,
    RaciRole.INFORMED,
]


def _coerce_id(raw: Any) -> Optional[int]:
    """Return raw as a positive int, or None if it is not one."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
        value = int(raw.strip())
    else:
        return None
    return value if value > 0 else None


class RaciIdSet:
    """Immutable set of user ids holding a consulted or informed role.

    Construction validates every identifier: ids must be positive integers
    (numeric strings are accepted) and must not repeat. Equality and hashing
    ignore insertion order; iteration preserves it.
    """

    __slots__ = ("_ids", "_members")

    def __init__(self, ids: Optional[Iterable[Any]] = None, field: Optional[str] = None):
        ordered: list[int] = []
        seen: set[int] = set()
        invalid: list[Any] = []
        duplicates: list[int] = []

        for raw in ids or ():
            value = _coerce_id(raw)
            if value is None:
                invalid.append(raw)
            elif value in seen:
                duplicates.append(value)
            else:
                seen.add(value)
                ordered.append(value)

        label = field or "RACI user ids"
        if invalid:
            raise InvalidRaciIdsError(
                f"{label} must contain positive integer user ids (got {invalid!r})",
                invalid_ids=invalid,
                parameter=field,
            )
        if duplicates:
            raise InvalidRaciIdsError(
                f"{label} must not contain duplicate user ids (got {duplicates!r})",
                invalid_ids=duplicates,
                parameter=field,
            )

        self._ids = tuple(ordered)
        self._members = frozenset(ordered)

    @classmethod
    def from_stored(cls, ids: Iterable[int]) -> "RaciIdSet":
        """Build a set from persisted rows, which are unique by constraint."""
        return cls(ids)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._members

    def __iter__(self) -> Iterator[int]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RaciIdSet):
            return self._members == other._members
        if isinstance(other, (set, frozenset)):
            return self._members == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        return f"RaciIdSet({list(self._ids)!r})"

    def to_list(self) -> list[int]:
        return list(self._ids)
