"""
Base Domain Classes

Building blocks shared by every app:
- ValueObject: Immutable objects compared by value
- DomainEvent: Events that represent something that happened
- EventRecorder: Collects events during a use case for the unit of work
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from django.utils import timezone  # type: ignore


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Events are collected while a use case runs and published on the
    message bus only after the surrounding transaction commits.
    Subclasses add their payload fields with defaults, since the base
    fields already carry defaults.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=timezone.now)
    aggregate_id: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': self.aggregate_id,
        }


class EventRecorder:
    """
    Mixin for models that raise domain events

    Django models can't be dataclasses, so events are kept on a plain
    instance attribute created lazily.
    """

    def add_event(self, event: DomainEvent):
        self.__dict__.setdefault('_pending_events', []).append(event)

    def clear_events(self):
        self.__dict__['_pending_events'] = []

    @property
    def events(self) -> List[DomainEvent]:
        return list(self.__dict__.get('_pending_events', []))
