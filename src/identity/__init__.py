from .normalizer import (
    EMAIL_CLAIM_PRIORITY,
    CanonicalEmail,
    IdentityNormalizer,
    IdentitySource,
)
from .principal import (
    CLIENT_PRINCIPAL_HEADER,
    Claim,
    PrincipalIdentity,
    decode_client_principal,
    principal_from_headers,
)

__all__ = [
    "CLIENT_PRINCIPAL_HEADER",
    "EMAIL_CLAIM_PRIORITY",
    "CanonicalEmail",
    "Claim",
    "IdentityNormalizer",
    "IdentitySource",
    "PrincipalIdentity",
    "decode_client_principal",
    "principal_from_headers",
]
