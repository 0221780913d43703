import json

import pytest

from cryptomoji.models import Collection, Moji, SireListing, new_moji


def test_collection_wire_format():
    c = Collection(owner="pub1", moji=("a1", "a2", "a3"))
    assert json.loads(c.encode()) == {"key": "pub1", "moji": ["a1", "a2", "a3"]}
    assert Collection.decode(c.encode()) == c


def test_moji_defaults_to_empty_lineage():
    m = Moji(dna="d" * 36, owner="pub1")
    assert json.loads(m.encode()) == {
        "dna": "d" * 36,
        "owner": "pub1",
        "breeder": "",
        "sire": "",
        "bred": [],
        "sired": [],
    }
    assert Moji.decode(m.encode()) == m


def test_sire_listing_wire_format():
    s = SireListing(owner="pub1", sire="addr")
    assert s.encode() == b'{"owner":"pub1","sire":"addr"}'
    assert SireListing.decode(s.encode()) == s


def test_encoding_is_byte_stable():
    assert Moji(dna="x", owner="y").encode() == Moji(dna="x", owner="y").encode()


def test_new_moji_preserves_order():
    mojis = new_moji("pub1", ["d1", "d2", "d3"])
    assert [m.dna for m in mojis] == ["d1", "d2", "d3"]
    assert all(m.owner == "pub1" for m in mojis)


@pytest.mark.parametrize("data", [b"", b"[]", b"\xff"])
def test_decode_rejects_non_objects(data):
    with pytest.raises(ValueError):
        Collection.decode(data)
