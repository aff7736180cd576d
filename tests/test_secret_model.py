import datetime
from decimal import Decimal

from vanishingkeys.models.secret import Secret, SecretStatus

T0 = datetime.datetime(2024, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


def _item(**overrides):
    item = {
        "secretId": "abc",
        "encryptedSecret": "ciphertext",
        "createdTime": "2024-01-01T12:00:00.000Z",
        "lastUpdated": "2024-01-01T12:00:00.000Z",
        "consumedAtTime": None,
        "TTL": int(T0.timestamp()) + 300,
    }
    item.update(overrides)
    return item


def test_from_item_parses_wire_shape():
    secret = Secret.from_item(_item(TTL=Decimal(int(T0.timestamp()) + 300)))

    assert secret.createdTime == T0
    assert secret.TTL == int(T0.timestamp()) + 300
    assert isinstance(secret.TTL, int)
    assert secret.status == SecretStatus.ACTIVE
    assert secret.expires_at == T0 + datetime.timedelta(minutes=5)


def test_to_item_wire_shape():
    secret = Secret.from_item(_item(consumedAtTime="2024-01-01T12:00:01.250Z"))

    item = secret.to_item()

    assert item == _item(consumedAtTime="2024-01-01T12:00:01.250Z")
    assert secret.status == SecretStatus.CONSUMED


def test_naive_timestamps_are_utc():
    secret = Secret.from_item(_item(createdTime="2024-01-01T12:00:00"))
    assert secret.createdTime == T0


def test_is_expired_is_strict():
    secret = Secret.from_item(_item())
    deadline = T0 + datetime.timedelta(minutes=5)

    assert not secret.is_expired(deadline)
    assert secret.is_expired(deadline + datetime.timedelta(seconds=1))


def test_unknown_attributes_are_ignored():
    secret = Secret.from_item(_item(someBackendAttribute="x"))
    assert "someBackendAttribute" not in secret.to_item()
