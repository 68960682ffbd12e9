from .client import DataverseClient
from .query import And, Eq, ODataQuery

__all__ = [
    "And",
    "DataverseClient",
    "Eq",
    "ODataQuery",
]
