"""State transitions for the cryptomoji family.

Each transition follows the same shape: read what the preconditions need,
check them, build the new records, then hand every update to the store in a
single ``set`` call. A failed precondition raises ``InvalidTransaction``
before anything is written, so the host never sees a partial update.

Addresses are derived under ``namespace``, which defaults to the process
configuration when not given.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from cryptomoji.addressing import collection_address, moji_address, sire_address
from cryptomoji.dna import dna_chain
from cryptomoji.errors import InvalidTransaction, RejectReason
from cryptomoji.models import Collection, SireListing, new_moji
from cryptomoji.observability import Layer, get_logger
from cryptomoji.state import StateStore, has_data
from cryptomoji.transactions import Transaction

logger = get_logger("handlers", Layer.HANDLER)


async def create_collection(
    store: StateStore,
    txn: Transaction,
    namespace: Optional[str] = None,
) -> List[str]:
    """Create the signer's collection and its three starting moji.

    Raises:
        InvalidTransaction: OWNER_ALREADY_EXISTS if the signer already has
            a collection.
    """
    public_key = txn.header.signer_public_key
    address = collection_address(public_key, namespace)

    state = await store.get([address])
    if has_data(state, address):
        raise InvalidTransaction(RejectReason.OWNER_ALREADY_EXISTS, owner=public_key)

    mojis = new_moji(public_key, list(dna_chain(txn.signature)))
    moji_addresses = [moji_address(public_key, m.dna, namespace) for m in mojis]
    collection = Collection(owner=public_key, moji=tuple(moji_addresses))

    updates: Dict[str, bytes] = {address: collection.encode()}
    for moji_addr, moji in zip(moji_addresses, mojis):
        updates[moji_addr] = moji.encode()

    written = await store.set(updates)
    logger.info("collection created", owner=public_key, addresses=written)
    return written


async def select_sire(
    store: StateStore,
    txn: Transaction,
    sire: str,
    namespace: Optional[str] = None,
) -> List[str]:
    """List the moji at ``sire`` as the signer's sire.

    Any previous listing by the signer is replaced. The sire is not checked
    for ownership: a signer may list a moji they do not own.

    Raises:
        InvalidTransaction: NO_COLLECTION if the signer has no collection,
            SIRE_NOT_FOUND if nothing is stored at ``sire``.
    """
    public_key = txn.header.signer_public_key
    owner_collection = collection_address(public_key, namespace)

    state = await store.get([owner_collection])
    if not has_data(state, owner_collection):
        raise InvalidTransaction(RejectReason.NO_COLLECTION, owner=public_key)

    state = await store.get([sire])
    if not has_data(state, sire):
        raise InvalidTransaction(RejectReason.SIRE_NOT_FOUND, sire=sire)

    listing = SireListing(owner=public_key, sire=sire)
    written = await store.set({sire_address(public_key, namespace): listing.encode()})
    logger.info("sire selected", owner=public_key, sire=sire)
    return written
