import asyncio
import io
import json

import pytest

from cryptomoji.addressing import collection_address, moji_address, sire_address
from cryptomoji.config import FamilyConfig
from cryptomoji.dna import dna_chain
from cryptomoji.encoding import CreateCollection, SelectSire
from cryptomoji.errors import InvalidTransaction, RejectReason, UnknownFamily
from cryptomoji.observability import configure_logging
from cryptomoji.processor import HandlerRegistry, MojiHandler, TransactionHandler, dispatch
from cryptomoji.transactions import Transaction, TransactionHeader, create_transaction


def _raw_txn(payload: bytes, public_key: str = "pub1", signature: str = "abc123") -> Transaction:
    return Transaction(
        payload=payload,
        header=TransactionHeader(
            signer_public_key=public_key,
            family_name="cryptomoji",
            family_version="0.1",
        ),
        signature=signature,
    )


def _apply(handler, txn, store):
    return asyncio.run(handler.apply(txn, store))


def test_handler_exposes_family_capability():
    handler = MojiHandler()
    assert isinstance(handler, TransactionHandler)
    assert handler.family_name == "cryptomoji"
    assert tuple(handler.family_versions) == ("0.1",)
    assert tuple(handler.namespaces) == ("5f4d76",)


def test_handler_uses_given_config():
    handler = MojiHandler(FamilyConfig(family_name="moji-test", family_version="2.0", namespace="abcdef"))
    assert handler.family_name == "moji-test"
    assert tuple(handler.family_versions) == ("2.0",)
    assert tuple(handler.namespaces) == ("abcdef",)


def test_apply_create_collection(store):
    written = _apply(MojiHandler(), _raw_txn(b'{"action":"CREATE_COLLECTION"}'), store)
    assert collection_address("pub1") in written
    assert len(written) == 4


def test_apply_select_sire(store):
    handler = MojiHandler()
    _apply(handler, _raw_txn(b'{"action":"CREATE_COLLECTION"}', "pub1", "sig1"), store)
    _apply(handler, _raw_txn(b'{"action":"CREATE_COLLECTION"}', "pub2", "sig2"), store)
    sire = moji_address("pub2", dna_chain("sig2")[2])
    payload = json.dumps({"action": "SELECT_SIRE", "sire": sire}).encode()

    written = _apply(handler, _raw_txn(payload, "pub1", "sig3"), store)

    assert written == [sire_address("pub1")]


@pytest.mark.parametrize(
    "payload, reason",
    [
        (b"\x00\x01garbage", RejectReason.MALFORMED_PAYLOAD),
        (b'{"action":"SELECT_SIRE"}', RejectReason.MALFORMED_PAYLOAD),
        (b'{"action":"TRANSFER"}', RejectReason.UNKNOWN_ACTION),
        (b"{}", RejectReason.UNKNOWN_ACTION),
    ],
)
def test_apply_rejects_bad_payloads_without_writing(store, payload, reason):
    with pytest.raises(InvalidTransaction) as ei:
        _apply(MojiHandler(), _raw_txn(payload), store)
    assert ei.value.reason is reason
    assert store.writes == 0


def test_dispatch_routes_variants(store):
    txn = _raw_txn(b"")
    written = asyncio.run(dispatch(CreateCollection(), txn, store))
    assert len(written) == 4

    with pytest.raises(InvalidTransaction) as ei:
        asyncio.run(dispatch(SelectSire(sire=moji_address("x", "y")), txn, store))
    assert ei.value.reason is RejectReason.SIRE_NOT_FOUND


def test_dispatch_without_payload_is_malformed(store):
    with pytest.raises(InvalidTransaction) as ei:
        asyncio.run(dispatch(None, _raw_txn(b""), store))
    assert ei.value.reason is RejectReason.MALFORMED_PAYLOAD


def test_dispatch_rejects_unknown_variant(store):
    with pytest.raises(InvalidTransaction) as ei:
        asyncio.run(dispatch(object(), _raw_txn(b""), store))
    assert ei.value.reason is RejectReason.UNKNOWN_ACTION


def test_rejection_is_logged_with_reason_code(store):
    stream = io.StringIO()
    root = configure_logging("info", stream)
    try:
        txn = _raw_txn(b'{"action":"CREATE_COLLECTION"}')
        _apply(MojiHandler(), txn, store)
        with pytest.raises(InvalidTransaction):
            _apply(MojiHandler(), txn, store)
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)

    events = [json.loads(line) for line in stream.getvalue().splitlines()]
    rejected = [e for e in events if e.get("error_code") == "OwnerAlreadyExists"]
    assert rejected
    assert rejected[0]["layer"] == "processor"
    assert rejected[0]["correlation_id"] == "abc123"
    assert any(e.get("operation") == "apply" for e in events)


# -----------------------------------------------------------------------------
# Host-side registry
# -----------------------------------------------------------------------------


def test_registry_routes_by_family(store, private_key):
    registry = HandlerRegistry()
    registry.register(MojiHandler())
    assert registry.families() == [("cryptomoji", "0.1")]

    txn = create_transaction(private_key, CreateCollection())
    written = asyncio.run(registry.process(txn, store))

    assert collection_address(txn.header.signer_public_key) in written


def test_registry_unknown_family(store):
    registry = HandlerRegistry()
    registry.register(MojiHandler())
    txn = Transaction(
        payload=b'{"action":"CREATE_COLLECTION"}',
        header=TransactionHeader(signer_public_key="pub1", family_name="intkey", family_version="1.0"),
        signature="abc",
    )
    with pytest.raises(UnknownFamily):
        asyncio.run(registry.process(txn, store))
    assert store.writes == 0


def test_registry_rejects_duplicates_and_non_handlers():
    registry = HandlerRegistry()
    registry.register(MojiHandler())
    with pytest.raises(ValueError):
        registry.register(MojiHandler())
    with pytest.raises(TypeError):
        registry.register(object())


def test_handler_writes_only_under_its_namespace(store):
    handler = MojiHandler(FamilyConfig(family_name="cryptomoji", family_version="0.1", namespace="abcdef"))
    written = _apply(handler, _raw_txn(b'{"action":"CREATE_COLLECTION"}', "pub1", "sig1"), store)
    written += _apply(handler, _raw_txn(b'{"action":"CREATE_COLLECTION"}', "pub2", "sig2"), store)

    sire = moji_address("pub2", dna_chain("sig2")[0], namespace="abcdef")
    payload = json.dumps({"action": "SELECT_SIRE", "sire": sire}).encode()
    written += _apply(handler, _raw_txn(payload, "pub1", "sig3"), store)

    assert len(written) == 9
    assert all(address.startswith("abcdef") for address in written)
    assert all(address.startswith("abcdef") for address in store.addresses(""))
    assert collection_address("pub1", namespace="abcdef") in written
    assert sire_address("pub1", namespace="abcdef") in written


def test_operation_log_carries_correlation_id(store):
    stream = io.StringIO()
    root = configure_logging("info", stream)
    try:
        _apply(MojiHandler(), _raw_txn(b'{"action":"CREATE_COLLECTION"}', signature="feedbeef"), store)
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)

    events = [json.loads(line) for line in stream.getvalue().splitlines()]
    timed = [e for e in events if e.get("operation") == "apply"]
    assert timed
    assert timed[0]["correlation_id"] == "feedbeef"
