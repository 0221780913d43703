import json

import pytest

from cryptomoji.addressing import moji_address
from cryptomoji.encoding import (
    CreateCollection,
    SelectSire,
    decode_payload,
    encode_payload,
    validate_payload,
)
from cryptomoji.errors import InvalidTransaction, RejectReason


SIRE = moji_address("pub1", "a" * 36)


def _reason(data: bytes) -> RejectReason:
    with pytest.raises(InvalidTransaction) as ei:
        decode_payload(data)
    return ei.value.reason


def test_decode_create_collection():
    assert decode_payload(b'{"action":"CREATE_COLLECTION"}') == CreateCollection()


def test_decode_select_sire():
    payload = decode_payload(json.dumps({"action": "SELECT_SIRE", "sire": SIRE}).encode())
    assert payload == SelectSire(sire=SIRE)
    assert payload.action == "SELECT_SIRE"


def test_encode_is_canonical():
    assert encode_payload(SelectSire(sire=SIRE)) == (
        '{"action":"SELECT_SIRE","sire":"%s"}' % SIRE
    ).encode()
    assert encode_payload({"sire": SIRE, "action": "SELECT_SIRE"}) == encode_payload(SelectSire(sire=SIRE))


def test_encoded_payload_decodes_to_same_variant():
    for payload in (CreateCollection(), SelectSire(sire=SIRE)):
        assert decode_payload(encode_payload(payload)) == payload


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"not json",
        b"\xff\xfe",
        b"[1, 2]",
        b'"CREATE_COLLECTION"',
        b"null",
        b"1" * 5000,
        b"[" * 100000,
    ],
)
def test_undecodable_bytes_are_malformed(data):
    assert _reason(data) is RejectReason.MALFORMED_PAYLOAD


@pytest.mark.parametrize(
    "data",
    [b"{}", b'{"action":"BREED_MOJI"}', b'{"action":null}', b'{"action":42}', b'{"action":"create_collection"}'],
)
def test_missing_or_unknown_action(data):
    assert _reason(data) is RejectReason.UNKNOWN_ACTION


@pytest.mark.parametrize(
    "obj",
    [
        {"action": "SELECT_SIRE"},
        {"action": "SELECT_SIRE", "sire": ""},
        {"action": "SELECT_SIRE", "sire": 12},
        {"action": "SELECT_SIRE", "sire": "5f4d76"},
        {"action": "SELECT_SIRE", "sire": SIRE.upper()},
    ],
)
def test_select_sire_without_valid_address_is_malformed(obj):
    assert _reason(json.dumps(obj).encode()) is RejectReason.MALFORMED_PAYLOAD


def test_extra_fields_are_ignored():
    assert decode_payload(b'{"action":"CREATE_COLLECTION","memo":"hi"}') == CreateCollection()


def test_validate_payload_reports_path():
    errors = validate_payload({"action": "SELECT_SIRE", "sire": 1}, "SELECT_SIRE")
    assert errors
    assert errors[0].startswith("$.sire")
