"""Guest identity resolution."""

from __future__ import annotations

import logging
from typing import Optional

from shared.domain.exceptions import GuestResolutionError, ValidationError
from shared.infrastructure.api_client import ApiError, BookingApiClient

from .domain.entities import Guest
from .serializers import normalize_guest, normalize_guest_list

logger = logging.getLogger(__name__)

GUESTS_PATH = "/guests"


class GuestResolver:
    """
    Get-or-create of a guest by email

    Lookup first (``GET /guests?email=``), create only when nothing matches.
    The two steps are not atomic: two concurrent calls with the same unseen
    email may both create a guest. Exactly-once creation needs a unique
    constraint on the backend; this client does not retry on conflict.
    """

    def __init__(self, api: BookingApiClient):
        self.api = api

    def find_by_email(self, email: str) -> Optional[Guest]:
        """
        First guest whose email matches, case-insensitively

        The backend filter is not trusted, so results are re-filtered here.
        Malformed records are skipped. Raises ApiError when the lookup itself
        fails.
        """
        payload = self.api.get(GUESTS_PATH, params={"email": email})
        guests = normalize_guest_list(payload, skip_invalid=True)
        for guest in guests:
            if guest.matches_email(email):
                return guest
        if guests:
            logger.warning(
                f"Guest lookup for {email} returned {len(guests)} non-matching record(s)"
            )
        return None

    def resolve(self, name: str, email: str, phone: Optional[str] = None) -> Guest:
        """
        Return the existing guest for ``email`` or create one

        A failed lookup is not an error, it just leads to creation.

        Raises:
            ValidationError: name or email missing
            GuestResolutionError: creation failed
        """
        name = (name or "").strip()
        email = (email or "").strip()
        if not name:
            raise ValidationError("Guest name is required")
        if not email or "@" not in email:
            raise ValidationError(f"Invalid guest email: {email!r}")

        lookup_error: Optional[ApiError] = None
        try:
            existing = self.find_by_email(email)
        except ApiError as e:
            logger.info(f"Guest lookup for {email} failed, will create: {e}")
            lookup_error = e
            existing = None

        if existing is not None:
            logger.info(f"Resolved existing guest {existing.id} for {email}")
            return existing

        create_data = {"name": name, "email": email}
        if phone:
            create_data["phone"] = phone

        try:
            guest = normalize_guest(self.api.post(GUESTS_PATH, json=create_data))
        except ApiError as e:
            if lookup_error is not None:
                message = f"Guest lookup failed ({lookup_error}) and creation failed ({e})"
            else:
                message = f"Could not create guest profile for {email}: {e}"
            logger.error(message)
            raise GuestResolutionError(message) from e

        logger.info(f"Created guest {guest.id} for {email}")
        return guest
