from .sas import (
    SignedUrlIssuer,
    SignedUrlResult,
    StorageAccount,
    normalize_blob_path,
    parse_connection_string,
)

__all__ = [
    "SignedUrlIssuer",
    "SignedUrlResult",
    "StorageAccount",
    "normalize_blob_path",
    "parse_connection_string",
]
