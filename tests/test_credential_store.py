import json

import pytest

from typeboard.core.errors import StoreIOError
from typeboard.models.binding import hash_credential
from typeboard.stores import CredentialStore


def _assert_bijection(data):
    reverse = data["byHash"]
    for key, entry in data["byUser"].items():
        assert reverse[hash_credential(entry["credential"])] == entry["username"]
    assert len(set(reverse.values())) == len(reverse)
    assert len(reverse) == len(data["byUser"])


@pytest.mark.anyio
async def test_first_use_creates_empty_document(tmp_path):
    store = CredentialStore(tmp_path / "nested" / "keystore.json")

    assert await store.get_credential("alice") is None
    assert json.loads((tmp_path / "nested" / "keystore.json").read_text()) == {
        "byUser": {},
        "byHash": {},
    }


@pytest.mark.anyio
async def test_upsert_writes_forward_and_reverse(credential_store):
    await credential_store.upsert_binding("  Alice ", "ape_one")

    assert await credential_store.get_credential("alice") == "ape_one"
    assert await credential_store.get_credential("ALICE") == "ape_one"
    assert (
        await credential_store.find_username_by_credential_hash(hash_credential("ape_one"))
        == "Alice"
    )


@pytest.mark.anyio
async def test_rebind_retracts_old_reverse_entry(credential_store):
    await credential_store.upsert_binding("alice", "c1")
    await credential_store.upsert_binding("alice", "c2")

    assert await credential_store.find_username_by_credential_hash(hash_credential("c1")) is None
    assert await credential_store.find_username_by_credential_hash(hash_credential("c2")) == "alice"
    assert await credential_store.get_credential("alice") == "c2"


@pytest.mark.anyio
async def test_credential_claimed_by_new_username_leaves_one_owner(credential_store):
    await credential_store.upsert_binding("alice", "shared")
    await credential_store.upsert_binding("bob", "shared")

    assert await credential_store.get_credential("alice") is None
    assert await credential_store.get_credential("bob") == "shared"
    assert await credential_store.find_username_by_credential_hash(hash_credential("shared")) == "bob"


@pytest.mark.anyio
async def test_bijection_holds_across_mixed_operations(tmp_path):
    path = tmp_path / "keystore.json"
    store = CredentialStore(path)
    operations = [
        ("upsert", "alice", "c1"),
        ("upsert", "bob", "c2"),
        ("upsert", "Alice", "c3"),
        ("upsert", "carol", "c2"),
        ("delete", "bob", None),
        ("upsert", "bob", "c1"),
        ("delete", "carol", None),
        ("upsert", "dave", "c3"),
        ("delete", "alice", None),
    ]

    for op, username, credential in operations:
        if op == "upsert":
            await store.upsert_binding(username, credential)
        else:
            await store.delete_binding(username)
        _assert_bijection(json.loads(path.read_text()))

    bindings = {b.username: b.credential for b in await store.list_bindings()}
    assert bindings == {"bob": "c1", "dave": "c3"}


@pytest.mark.anyio
async def test_delete_removes_both_indices(credential_store):
    await credential_store.upsert_binding("alice", "c1")

    assert await credential_store.delete_binding("ALICE") is True
    assert await credential_store.get_credential("alice") is None
    assert await credential_store.find_username_by_credential_hash(hash_credential("c1")) is None
    assert await credential_store.delete_binding("alice") is False


@pytest.mark.anyio
async def test_delete_keeps_reverse_entry_pointing_elsewhere(tmp_path):
    path = tmp_path / "keystore.json"
    path.write_text(
        json.dumps(
            {
                "byUser": {"alice": {"username": "alice", "credential": "c1"}},
                "byHash": {hash_credential("c1"): "bob"},
            }
        )
    )
    store = CredentialStore(path)

    assert await store.delete_binding("alice") is True
    assert await store.find_username_by_credential_hash(hash_credential("c1")) == "bob"


@pytest.mark.anyio
async def test_bind_if_absent(credential_store):
    assert await credential_store.bind_if_absent("alice", "c1") is None

    by_name = await credential_store.bind_if_absent("ALICE", "c2")
    assert by_name.username == "alice" and by_name.credential == "c1"

    by_key = await credential_store.bind_if_absent("bob", "c1")
    assert by_key.username == "alice"

    assert await credential_store.get_credential("bob") is None
    assert await credential_store.find_username_by_credential_hash(hash_credential("c2")) is None


@pytest.mark.anyio
async def test_reads_legacy_list_layout(tmp_path):
    path = tmp_path / "keystore.json"
    path.write_text(json.dumps([{"username": "shira", "apeKey": "ape_legacy"}]))
    store = CredentialStore(path)

    assert await store.get_credential("Shira") == "ape_legacy"
    assert await store.find_username_by_credential_hash(hash_credential("ape_legacy")) == "shira"


@pytest.mark.anyio
async def test_unreadable_document_raises_store_error(tmp_path):
    path = tmp_path / "keystore.json"
    path.write_text("{not json")
    store = CredentialStore(path)

    with pytest.raises(StoreIOError):
        await store.get_credential("alice")
