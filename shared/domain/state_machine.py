"""
Status Transition Tables

Each lifecycle (booking, rental, tour booking, provider contract) declares
its allowed moves once, as a ``TransitionTable``. Managers call
``ensure()`` before writing a new status, so no code path can skip the
check.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping

from shared.domain.exceptions import InvalidTransition


@dataclass(frozen=True)
class TransitionTable:
    """
    Allowed status moves for one entity

    ``allow_reentry`` accepts "move" to the current status (an idempotent
    re-application, e.g. approving an already approved rental).
    """
    name: str
    transitions: Mapping[str, FrozenSet[str]]
    allow_reentry: bool = True
    _states: FrozenSet[str] = field(init=False, repr=False)

    def __post_init__(self):
        states = set(self.transitions)
        for targets in self.transitions.values():
            states.update(targets)
        object.__setattr__(self, '_states', frozenset(states))

    @classmethod
    def build(cls, name: str, moves: Dict[str, Iterable[str]], allow_reentry: bool = True) -> 'TransitionTable':
        return cls(
            name=name,
            transitions={source: frozenset(targets) for source, targets in moves.items()},
            allow_reentry=allow_reentry,
        )

    @property
    def states(self) -> FrozenSet[str]:
        return self._states

    def targets(self, current: str) -> FrozenSet[str]:
        return self.transitions.get(current, frozenset())

    def can(self, current: str, new: str) -> bool:
        if new not in self._states:
            return False
        if current == new:
            return self.allow_reentry
        return new in self.targets(current)

    def ensure(self, current: str, new: str) -> None:
        """Raise InvalidTransition unless ``current -> new`` is allowed"""
        if new not in self._states:
            raise InvalidTransition(f"Unknown {self.name} status '{new}'", field='status')
        if not self.can(current, new):
            raise InvalidTransition(
                f"{self.name.capitalize()} cannot move from '{current}' to '{new}'",
                field='status',
            )

    def is_terminal(self, status: str) -> bool:
        return not self.targets(status)
