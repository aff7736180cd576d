import abc
import datetime
import math


class BaseClock(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def now(self) -> datetime.datetime:
        """
        Get the current instant.

        Returns:
            datetime.datetime: timezone-aware UTC datetime.
        """
        raise NotImplementedError("now() method not implemented")


class SystemClock(BaseClock):
    def now(self) -> datetime.datetime:
        return datetime.datetime.now(tz=datetime.timezone.utc)


def to_epoch_seconds(dt: datetime.datetime) -> int:
    # halves round up
    return math.floor(dt.timestamp() + 0.5)


def to_iso(dt: datetime.datetime) -> str:
    # millisecond precision, "Z" suffix: 2024-01-01T00:00:00.000Z
    dt = dt.astimezone(datetime.timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
