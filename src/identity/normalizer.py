"""
Canonical email resolution for the worker directory lookup.

Known limitation: guest accounts encode the original ``@`` as ``_`` before the
``#EXT#`` marker, and the rule used here (last underscore becomes ``@``) is
ambiguous when the mailbox domain itself contains underscores, or when the
local part does and the domain does not (``first_last_domain.com``). Values
produced by that rule are flagged ``guest_heuristic`` so callers can audit
them. Claims are preferred whenever the platform supplies one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from src.errors import IdentityResolutionError

from .principal import PrincipalIdentity

GUEST_MARKER = "#EXT#"

EMAIL_CLAIM_PRIORITY = (
    "email",
    "emails",
    "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress",
    "preferred_username",
    "name",
)


class IdentitySource(str, Enum):
    CLAIM = "claim"
    DISPLAY = "display"


@dataclass(frozen=True)
class CanonicalEmail:
    value: str
    source: IdentitySource
    guest_heuristic: bool
    raw_value: str

    @property
    def low_confidence(self) -> bool:
        return self.guest_heuristic

    def __str__(self) -> str:
        return self.value


class IdentityNormalizer:
    """Maps a platform principal to the email used as directory key."""

    def __init__(self, claim_priority: Sequence[str] = EMAIL_CLAIM_PRIORITY):
        self.claim_priority = tuple(claim_priority)

    def normalize(self, principal: Optional[PrincipalIdentity]) -> CanonicalEmail:
        """
        Resolve the canonical email for a principal.

        Args:
            principal: Decoded platform principal (None when the header was absent)

        Returns:
            CanonicalEmail

        Raises:
            IdentityResolutionError: no value with exactly one ``@`` can be derived
        """
        if principal is None:
            raise IdentityResolutionError("No authenticated principal")

        working = self._from_claims(principal)
        source = IdentitySource.CLAIM
        if working is None:
            working = (principal.raw_value or "").strip()
            source = IdentitySource.DISPLAY

        guest_heuristic = False
        if GUEST_MARKER in working:
            working, guest_heuristic = self._unwrap_guest(working)
        elif "#" in working:
            working = working.rsplit("#", 1)[1]

        if working.count("@") != 1:
            raise IdentityResolutionError("Unable to determine the caller's email")

        return CanonicalEmail(
            value=working,
            source=source,
            guest_heuristic=guest_heuristic,
            raw_value=principal.raw_value,
        )

    def _from_claims(self, principal: PrincipalIdentity) -> Optional[str]:
        if not principal.claims:
            return None
        by_type: dict = {}
        for claim in principal.claims:
            value = claim.value.strip()
            if value:
                by_type.setdefault(claim.type, value)
        for claim_type in self.claim_priority:
            if claim_type in by_type:
                return by_type[claim_type]
        return None

    @staticmethod
    def _unwrap_guest(value: str) -> tuple[str, bool]:
        prefix = value.split(GUEST_MARKER, 1)[0]
        local, sep, domain = prefix.rpartition("_")
        if not sep:
            return prefix, False
        return f"{local}@{domain}", True
