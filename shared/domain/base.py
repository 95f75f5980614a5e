"""
Base Domain Classes

Building blocks shared by the booking pipeline contexts:
- Entity: Records with a server-assigned identity
- ValueObject: Immutable objects compared by value
- DomainEvent: Events that represent something that happened
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4


@dataclass(frozen=True)
class Entity(ABC):
    """
    Base class for all entities

    Entities are identified by the id the remote API assigned to them.
    Two entities are equal if their IDs are equal, whatever else changed.
    Subclasses must be declared with ``eq=False`` to keep this behaviour.
    """
    id: str

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the pipeline.
    They are published on the message bus once the step that produced them
    has completed.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': self.aggregate_id,
        }
