import pytest

from meshsim.transaction import Transaction


def test_default_transaction_size_is_header():
    tx = Transaction()
    assert tx.payload == b""
    assert tx.size == tx.calculate_header_size()
    assert len(tx.serialize()) == tx.calculate_header_size()


def test_hash_has_fixed_width_and_is_stable():
    tx = Transaction(payload=b"hello", timestamp=3.25)
    assert len(tx.hash) == Transaction.HASH_SIZE
    assert tx.calculate_hash() == tx.hash


def test_given_hash_and_size_are_recomputed():
    a = Transaction(b"whatever", 0, b"x", 1.0)
    b = Transaction(b"other", 99, b"x", 1.0)
    assert a.hash == b.hash
    assert a.size == a.calculate_header_size() + 1


def test_serialize_length_matches_size():
    tx = Transaction(payload=b"payload bytes", timestamp=9.0)
    assert len(tx.serialize()) == tx.size


def test_round_trip():
    tx = Transaction(payload=b"some payload", timestamp=12.5)
    back = Transaction.from_bytes(tx.serialize())
    assert back.hash == tx.hash
    assert back.payload == tx.payload
    assert back.timestamp == tx.timestamp
    assert back.size == tx.size
    assert back.serialize() == tx.serialize()
    assert back == tx


def test_from_bytes_ignores_trailing_data():
    tx = Transaction(payload=b"abc", timestamp=1.0)
    back = Transaction.from_bytes(tx.serialize() + b"trailing")
    assert back.payload == b"abc"


def test_from_bytes_truncated_raises():
    tx = Transaction(payload=b"abcdef", timestamp=1.0)
    with pytest.raises(ValueError):
        Transaction.from_bytes(tx.serialize()[:-2])
    with pytest.raises(ValueError):
        Transaction.from_bytes(b"\x00" * 5)


def test_payload_setter_updates_size_and_hash():
    tx = Transaction(payload=b"a", timestamp=1.0)
    old_hash, old_size = tx.hash, tx.size
    tx.payload = b"abcd"
    assert tx.size == old_size + 3
    assert tx.hash != old_hash
    assert tx.hash == Transaction(payload=b"abcd", timestamp=1.0).hash


def test_timestamp_setter_updates_hash():
    tx = Transaction(payload=b"a", timestamp=1.0)
    old = tx.hash
    tx.timestamp = 2.0
    assert tx.hash != old
    assert tx.hash == tx.calculate_hash()


def test_hash_is_written_into_serialization():
    tx = Transaction(payload=b"p")
    tx.hash = b"h" * Transaction.HASH_SIZE
    assert Transaction.from_bytes(tx.serialize()).hash == b"h" * Transaction.HASH_SIZE


def test_equality_uses_hash():
    a = Transaction(payload=b"same", timestamp=4.0)
    b = Transaction(payload=b"same", timestamp=4.0)
    c = Transaction(payload=b"diff", timestamp=4.0)
    assert a == b
    assert a != c
    assert len({a, b, c}) == 2


def test_repr_format():
    tx = Transaction(payload=b"xyz", timestamp=1.5)
    text = repr(tx)
    assert text.startswith("Transaction(0x")
    assert ",1.5," in text