import pytest

from apps.guests.services import GuestResolver
from shared.domain.exceptions import GuestResolutionError, ValidationError
from shared.infrastructure.api_client import ApiError

KNOWN_GUEST = {"id": "g-1", "email": "Ana@Example.com", "firstName": "Ana", "lastName": "Pham"}


@pytest.fixture
def resolver(api):
    return GuestResolver(api)


def test_known_email_is_resolved_without_create(api, resolver):
    api.on("GET", "/guests", [KNOWN_GUEST])

    first = resolver.resolve("Ana Pham", "ana@example.com")
    second = resolver.resolve("Ana Pham", "ana@example.com")

    assert first.id == second.id == "g-1"
    assert first.name == "Ana Pham"
    assert api.count("POST", "/guests") == 0
    assert api.payloads("GET", "/guests") == [{"email": "ana@example.com"}] * 2


def test_lookup_results_are_refiltered_by_email(api, resolver):
    api.on("GET", "/guests", [{"id": "g-7", "email": "someone@else.com", "name": "Other"}])
    api.on("POST", "/guests", {"id": "g-8", "email": "ana@example.com", "name": "Ana Pham"})

    guest = resolver.resolve("Ana Pham", " ana@example.com ", phone="+84 90 123 4567")

    assert guest.id == "g-8"
    assert api.payloads("POST", "/guests") == [
        {"name": "Ana Pham", "email": "ana@example.com", "phone": "+84 90 123 4567"}
    ]


def test_malformed_lookup_record_is_skipped(api, resolver):
    api.on("GET", "/guests", [{"bad": 1}, KNOWN_GUEST])

    guest = resolver.resolve("Ana Pham", "ana@example.com")

    assert guest.id == "g-1"
    assert api.count("POST", "/guests") == 0


def test_failed_lookup_falls_back_to_create(api, resolver):
    api.on("GET", "/guests", ApiError("lookup timeout"))
    api.on("POST", "/guests", {"id": "g-2", "email": "bo@example.com", "name": "Bo"})

    guest = resolver.resolve("Bo", "bo@example.com")

    assert guest.id == "g-2"
    assert api.payloads("POST", "/guests") == [{"name": "Bo", "email": "bo@example.com"}]


def test_lookup_and_create_both_failing(api, resolver):
    api.on("GET", "/guests", ApiError("lookup timeout"))
    api.on("POST", "/guests", ApiError("create rejected", status_code=400))

    with pytest.raises(GuestResolutionError) as exc_info:
        resolver.resolve("Bo", "bo@example.com")

    assert "lookup timeout" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, ApiError)


def test_malformed_create_response_is_a_resolution_error(api, resolver):
    api.on("GET", "/guests", [])
    api.on("POST", "/guests", {"unexpected": True})

    with pytest.raises(GuestResolutionError):
        resolver.resolve("Bo", "bo@example.com")


@pytest.mark.parametrize("name, email", [("", "bo@example.com"), ("Bo", ""), ("Bo", "not-an-email")])
def test_invalid_input_is_rejected_locally(api, resolver, name, email):
    with pytest.raises(ValidationError):
        resolver.resolve(name, email)

    assert api.calls == []
