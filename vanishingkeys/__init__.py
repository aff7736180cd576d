"""
VanishingKeys - one-time-readable secret records on top of a key-value store.

Example:
    >>> from vanishingkeys import SecretStore
    >>> with SecretStore.from_config() as store:
    ...     store.create("abc", "<ciphertext>", ttl_duration=300)
    ...     secret = store.fetch_and_consume("abc")
"""

from vanishingkeys.exceptions.backend_io_exception import BackendIOException
from vanishingkeys.models.secret import (
    CreateResult,
    DeleteResult,
    Secret,
    SecretStatus,
)
from vanishingkeys.secretstore.secretstore import SecretStore

__version__ = "0.1.0"
__all__ = [
    "SecretStore",
    "Secret",
    "SecretStatus",
    "CreateResult",
    "DeleteResult",
    "BackendIOException",
]
