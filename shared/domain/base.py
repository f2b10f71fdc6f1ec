"""
Base Domain Classes

Foundational building blocks shared by the domain packages:
- ValueObject: Immutable objects compared by value
- EventSource: Mixin that lets a model collect domain events
- DomainEvent: Events that represent something that happened
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


class EventSource:
    """
    Mixin for aggregate roots

    Aggregates are the consistency boundaries of a command. They collect
    domain events that are published only after the surrounding
    transaction commits. Works on Django models as well as plain classes:
    the event list is not a database field.
    """

    def _event_buffer(self) -> List['DomainEvent']:
        buffer = self.__dict__.get('_pending_events')
        if buffer is None:
            buffer = []
            self.__dict__['_pending_events'] = buffer
        return buffer

    def add_event(self, event: 'DomainEvent'):
        """Add a domain event to be published"""
        self._event_buffer().append(event)

    def clear_events(self):
        """Clear all collected events (called after publishing)"""
        self._event_buffer().clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Get copy of collected events"""
        return list(self._event_buffer())


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    Subclasses must give their own fields defaults (dataclass ordering).
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: int | None = None

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': self.aggregate_id,
        }
