"""
Client registration lookup.

The resolver only needs a lookup by registration id; any object with a
matching ``find_by_registration_id`` method works as a repository.
"""

from typing import Dict, Iterable, Iterator, Optional, Protocol

from ..shared.oauth_models import ClientRegistration


class ClientRegistrationRepository(Protocol):
    """Lookup of client registrations by registration id."""

    def find_by_registration_id(self, registration_id: str) -> Optional[ClientRegistration]:
        ...


class InMemoryClientRegistrationRepository:
    """
    Read-only repository backed by a dictionary.

    Args:
        registrations: Client registrations; must be non-empty with unique ids

    Raises:
        ValueError: If no registrations are given or an id is duplicated
    """

    def __init__(self, registrations: Iterable[ClientRegistration]):
        by_id: Dict[str, ClientRegistration] = {}
        for registration in registrations:
            if registration.registration_id in by_id:
                raise ValueError(
                    f"Duplicate key {registration.registration_id}"
                )
            by_id[registration.registration_id] = registration

        if not by_id:
            raise ValueError("registrations cannot be empty")

        self._registrations = by_id

    def find_by_registration_id(self, registration_id: str) -> Optional[ClientRegistration]:
        if not registration_id:
            raise ValueError("registration_id cannot be empty")
        return self._registrations.get(registration_id)

    def __iter__(self) -> Iterator[ClientRegistration]:
        return iter(self._registrations.values())

    def __len__(self) -> int:
        return len(self._registrations)
