"""
Guest Domain Entities
"""

from dataclasses import dataclass
from typing import Optional

from shared.domain.base import Entity


@dataclass(frozen=True, eq=False)
class Guest(Entity):
    """
    Guest identity as stored by the hotel backend

    Email is the lookup key but is not guaranteed unique: two racing
    get-or-create calls can leave two guests with the same email.
    """
    name: str
    email: str
    phone: Optional[str] = None

    def matches_email(self, email: str) -> bool:
        return self.email.strip().lower() == email.strip().lower()
