import datetime
import logging
from typing import Optional, Union

import opentelemetry.trace as trace

from vanishingkeys.core.config import config
from vanishingkeys.exceptions.backend_io_exception import BackendIOException
from vanishingkeys.kvbackend.kvbackend import BaseKeyValueBackend
from vanishingkeys.kvbackend.kvbackendfactory import KeyValueBackendFactory
from vanishingkeys.models.secret import CreateResult, DeleteResult, Secret
from vanishingkeys.utils.clock import BaseClock, SystemClock, to_epoch_seconds, to_iso

tracer = trace.get_tracer(__name__)

DEFAULT_GRACE_WINDOW = datetime.timedelta(seconds=30)


class SecretStore:
    """
    Lifecycle of one-time-readable secrets: create once, read destructively,
    expire automatically.

    Expected outcomes (duplicate create, missing or expired secret) are result
    values. Only unexpected backend failures raise, as BackendIOException.

    Args:
        backend (BaseKeyValueBackend): the key-value store, owned by this store once passed in.
        clock (BaseClock): source of the current UTC instant.
        grace_window (timedelta): how long a consumed secret stays physically present.
        exactly_once (bool): if True, a secret is delivered to at most one caller.
            If False, any caller inside the grace window may receive it again.
    """

    def __init__(
        self,
        backend: BaseKeyValueBackend,
        clock: BaseClock = None,
        grace_window: datetime.timedelta = DEFAULT_GRACE_WINDOW,
        exactly_once: bool = False,
    ):
        self.logger = logging.getLogger(__name__)
        self.backend = backend
        self.clock = clock or SystemClock()
        self.grace_window = grace_window
        self.exactly_once = exactly_once

    @classmethod
    def from_config(cls, **kwargs) -> "SecretStore":
        backend = KeyValueBackendFactory.get_backend()
        grace_seconds = config("SECRET_STORE_GRACE_SECONDS", cast=int, default=30)
        exactly_once = config("SECRET_STORE_EXACTLY_ONCE", cast=bool, default=False)
        return cls(
            backend,
            grace_window=datetime.timedelta(seconds=grace_seconds),
            exactly_once=exactly_once,
            **kwargs,
        )

    def close(self) -> None:
        self.backend.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def create(
        self,
        secret_id: str,
        encrypted_secret,
        ttl_duration: Union[datetime.timedelta, int, float],
    ) -> CreateResult:
        if not isinstance(ttl_duration, datetime.timedelta):
            ttl_duration = datetime.timedelta(seconds=ttl_duration)

        now = self.clock.now()
        secret = Secret(
            secretId=secret_id,
            encryptedSecret=encrypted_secret,
            createdTime=now,
            lastUpdated=now,
            consumedAtTime=None,
            TTL=to_epoch_seconds(now + ttl_duration),
        )

        with tracer.start_as_current_span("create_secret"):
            try:
                created = self.backend.put_if_absent(secret_id, secret.to_item())
            except BackendIOException as e:
                self.logger.error(
                    "Failed to store secret",
                    extra={
                        "secret_id": secret_id,
                        "ttl_seconds": ttl_duration.total_seconds(),
                        "error": str(e),
                        "error_type": type(e.__cause__ or e).__name__,
                    },
                )
                raise

        if not created:
            self.logger.warning(
                "Secret already exists, leaving it untouched",
                extra={
                    "secret_id": secret_id,
                    "ttl_seconds": ttl_duration.total_seconds(),
                },
            )
            return CreateResult.ALREADY_EXISTS

        self.logger.info("Secret created", extra={"secret_id": secret_id})
        return CreateResult.CREATED

    def fetch_and_consume(self, secret_id: str) -> Optional[Secret]:
        """
        Deliver a secret and schedule its destruction.

        The consuming update shortens TTL to now + grace_window and stamps
        consumedAtTime; physical removal is left to the backend's reaper.

        Returns:
            Secret | None: the consumed record (still carrying encryptedSecret),
            or None if it never existed, is logically expired, or vanished
            before it could be consumed.
        """
        now = self.clock.now()
        with tracer.start_as_current_span("fetch_and_consume_secret"):
            try:
                item = self.backend.get(secret_id)
                if item is None:
                    return None

                current = Secret.from_item(item)
                # logical expiry, the row may not be reaped yet
                if current.is_expired(now):
                    self.logger.debug(
                        "Secret is expired", extra={"secret_id": secret_id}
                    )
                    return None

                updated = self.backend.update_if_exists(
                    secret_id,
                    {
                        "TTL": to_epoch_seconds(now + self.grace_window),
                        "consumedAtTime": to_iso(now),
                    },
                    require_unset="consumedAtTime" if self.exactly_once else None,
                )
            except BackendIOException as e:
                self.logger.error(
                    "Failed to fetch secret",
                    extra={
                        "secret_id": secret_id,
                        "error": str(e),
                        "error_type": type(e.__cause__ or e).__name__,
                    },
                )
                raise

        if updated is None:
            return None

        self.logger.info("Secret consumed", extra={"secret_id": secret_id})
        return Secret.from_item(updated)

    def delete(self, secret_id: str) -> DeleteResult:
        with tracer.start_as_current_span("delete_secret"):
            try:
                deleted = self.backend.delete(secret_id)
            except BackendIOException as e:
                self.logger.error(
                    "Failed to delete secret",
                    extra={
                        "secret_id": secret_id,
                        "error": str(e),
                        "error_type": type(e.__cause__ or e).__name__,
                    },
                )
                raise

        if not deleted:
            return DeleteResult.NOT_FOUND
        self.logger.info("Secret deleted", extra={"secret_id": secret_id})
        return DeleteResult.DELETED
