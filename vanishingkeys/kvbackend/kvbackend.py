import abc
import logging
from typing import Optional


class BaseKeyValueBackend(metaclass=abc.ABCMeta):
    """
    A key-value store with atomic conditional writes and native background
    expiry of records whose TTL attribute (epoch seconds) is in the past.

    "Condition failed" outcomes are return values; any other failure raises
    BackendIOException.
    """

    def __init__(self, key_name: str = "secretId", ttl_attribute: str = "TTL", **kwargs):
        self.logger = logging.getLogger(__name__)
        self.key_name = key_name
        self.ttl_attribute = ttl_attribute

    @abc.abstractmethod
    def put_if_absent(self, key: str, item: dict) -> bool:
        """
        Write an item only if no item with this key exists.

        Args:
            key (str): The item key.
            item (dict): The full item, including the key attribute.

        Returns:
            bool: True if written, False if an item already existed.
        """
        raise NotImplementedError(
            "put_if_absent() method not implemented"
            " for {}".format(self.__class__.__name__)
        )

    @abc.abstractmethod
    def get(self, key: str) -> Optional[dict]:
        """
        Read an item.

        Args:
            key (str): The item key.

        Returns:
            dict | None: The stored item, or None if absent.
        """
        raise NotImplementedError("get() method not implemented")

    @abc.abstractmethod
    def update_if_exists(
        self, key: str, updates: dict, require_unset: Optional[str] = None
    ) -> Optional[dict]:
        """
        Set attributes on an existing item.

        Args:
            key (str): The item key.
            updates (dict): Attribute name to new value.
            require_unset (str): If given, the update also requires this
                attribute to be absent or null.

        Returns:
            dict | None: The item after the update, or None if the condition failed.
        """
        raise NotImplementedError("update_if_exists() method not implemented")

    @abc.abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove an item unconditionally.

        Args:
            key (str): The item key.

        Returns:
            bool: True if an item was removed, False if there was none.
        """
        raise NotImplementedError("delete() method not implemented")

    def close(self) -> None:
        pass
