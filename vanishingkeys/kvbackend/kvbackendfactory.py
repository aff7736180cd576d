import enum

from vanishingkeys.core.config import config
from vanishingkeys.kvbackend.kvbackend import BaseKeyValueBackend


class KeyValueBackendTypes(enum.Enum):
    DYNAMODB = "dynamodb"
    MEMORY = "memory"


class KeyValueBackendFactory:
    @staticmethod
    def get_backend(
        backend_type: KeyValueBackendTypes = None, **kwargs
    ) -> BaseKeyValueBackend:
        if not backend_type:
            backend_type = KeyValueBackendTypes[
                config("SECRET_STORE_BACKEND", default="DYNAMODB").upper()
            ]
        if backend_type == KeyValueBackendTypes.DYNAMODB:
            from vanishingkeys.kvbackend.dynamodbkvbackend import (
                DynamoDbKeyValueBackend,
            )

            return DynamoDbKeyValueBackend(**kwargs)
        elif backend_type == KeyValueBackendTypes.MEMORY:
            from vanishingkeys.kvbackend.memorykvbackend import MemoryKeyValueBackend

            return MemoryKeyValueBackend(**kwargs)

        raise NotImplementedError(
            f"Key-value backend type {str(backend_type)} not implemented"
        )
