"""Email → principal id resolution.

The remote platform only offers a search by email; this module turns
that into a strict exactly-one lookup.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..exceptions import AmbiguousIdentityError, NotFoundError
from ..interfaces import RemoteService

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Resolve human-facing emails to opaque principal ids.

    Args:
        service: RemoteService used for ``search_principals_by_email``.

    Example::

        resolver = IdentityResolver(service)
        resolver.resolve("ana@example.com")             # "42"
        resolver.resolve_all({"ana@example.com", ...})   # {"42", ...}
    """

    def __init__(self, service: RemoteService) -> None:
        self._service = service

    def resolve(self, email: str) -> str:
        """Resolve one email to exactly one principal id.

        Raises:
            NotFoundError: No principal has this email.
            AmbiguousIdentityError: More than one principal has this email.
            RemoteError: The search call itself failed.
        """
        results = self._service.search_principals_by_email(email)
        if not results:
            raise NotFoundError(f"No user found with email {email}", email=email)
        if len(results) > 1:
            raise AmbiguousIdentityError(
                f"Multiple users found with email {email}",
                email=email,
                matches=sorted(p.id for p in results),
            )
        principal_id = results[0].id
        logger.debug("Resolved %s to principal %s", email, principal_id)
        return principal_id

    def resolve_all(self, emails: Iterable[str]) -> set[str]:
        """Resolve every email, failing on the first error.

        Emails are resolved in sorted order so the reported failure is
        deterministic. No partially resolved set is ever returned.
        """
        return {self.resolve(email) for email in sorted(set(emails))}


__all__ = ["IdentityResolver"]
