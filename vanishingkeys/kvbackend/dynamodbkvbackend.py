from typing import Optional

import boto3
import opentelemetry.trace as trace
from botocore.exceptions import BotoCoreError, ClientError

from vanishingkeys.core.config import config
from vanishingkeys.exceptions.backend_io_exception import BackendIOException
from vanishingkeys.kvbackend.kvbackend import BaseKeyValueBackend

tracer = trace.get_tracer(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class DynamoDbKeyValueBackend(BaseKeyValueBackend):
    def __init__(self, table_name: str = None, **kwargs):
        super().__init__(**kwargs)
        self.table_name = table_name or config(
            "SECRET_STORE_TABLE", default="VanishingKeys-secrets-prod"
        )
        try:
            self.resource = boto3.resource(
                "dynamodb",
                region_name=config("AWS_REGION", default=None),
                endpoint_url=config("DYNAMODB_ENDPOINT_URL", default=None),
            )
            self.table = self.resource.Table(self.table_name)
        except Exception as e:
            self.logger.error(
                "Failed to initialize DynamoDB client",
                extra={"table_name": self.table_name, "error": str(e)},
            )
            raise
        self.logger.info(
            "Using DynamoDB key-value backend", extra={"table_name": self.table_name}
        )

    def _raise_io_error(self, operation: str, key: str, e: Exception):
        extra = {
            "table_name": self.table_name,
            "key": key,
            "error": str(e),
            "error_type": type(e).__name__,
        }
        if isinstance(e, ClientError):
            extra["error_code"] = e.response["Error"]["Code"]
        self.logger.error(f"DynamoDB error during {operation}", extra=extra)
        raise BackendIOException(
            f"DynamoDB {operation} failed for {key}", operation=operation, key=key
        ) from e

    @staticmethod
    def _is_condition_failure(e: ClientError) -> bool:
        return e.response["Error"]["Code"] == CONDITIONAL_CHECK_FAILED

    def put_if_absent(self, key: str, item: dict) -> bool:
        with tracer.start_as_current_span("put_if_absent"):
            try:
                self.table.put_item(
                    Item=item,
                    ConditionExpression="attribute_not_exists(#key)",
                    ExpressionAttributeNames={"#key": self.key_name},
                )
                return True
            except ClientError as e:
                if self._is_condition_failure(e):
                    return False
                self._raise_io_error("put_if_absent", key, e)
            except BotoCoreError as e:
                self._raise_io_error("put_if_absent", key, e)

    def get(self, key: str) -> Optional[dict]:
        with tracer.start_as_current_span("get"):
            try:
                response = self.table.get_item(
                    Key={self.key_name: key}, ConsistentRead=True
                )
            except (ClientError, BotoCoreError) as e:
                self._raise_io_error("get", key, e)
            return response.get("Item")

    def update_if_exists(
        self, key: str, updates: dict, require_unset: Optional[str] = None
    ) -> Optional[dict]:
        with tracer.start_as_current_span("update_if_exists"):
            names = {"#key": self.key_name}
            values = {}
            assignments = []
            for i, (attribute, value) in enumerate(updates.items()):
                names[f"#a{i}"] = attribute
                values[f":v{i}"] = value
                assignments.append(f"#a{i} = :v{i}")

            condition = "attribute_exists(#key)"
            if require_unset:
                names["#unset"] = require_unset
                values[":null_type"] = "NULL"
                condition += (
                    " AND (attribute_not_exists(#unset)"
                    " OR attribute_type(#unset, :null_type))"
                )

            try:
                response = self.table.update_item(
                    Key={self.key_name: key},
                    UpdateExpression="SET " + ", ".join(assignments),
                    ConditionExpression=condition,
                    ExpressionAttributeNames=names,
                    ExpressionAttributeValues=values,
                    ReturnValues="ALL_NEW",
                )
                return response.get("Attributes")
            except ClientError as e:
                if self._is_condition_failure(e):
                    return None
                self._raise_io_error("update_if_exists", key, e)
            except BotoCoreError as e:
                self._raise_io_error("update_if_exists", key, e)

    def delete(self, key: str) -> bool:
        with tracer.start_as_current_span("delete"):
            try:
                response = self.table.delete_item(
                    Key={self.key_name: key}, ReturnValues="ALL_OLD"
                )
                return bool(response.get("Attributes"))
            except ClientError as e:
                if self._is_condition_failure(e):
                    return False
                self._raise_io_error("delete", key, e)
            except BotoCoreError as e:
                self._raise_io_error("delete", key, e)

    def close(self) -> None:
        self.resource.meta.client.close()
