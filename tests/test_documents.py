import asyncio
import json

import pytest

from typeboard.core.errors import StoreIOError
from typeboard.stores import JsonDocument


@pytest.mark.anyio
async def test_missing_file_is_created_with_default(tmp_path):
    doc = JsonDocument(tmp_path / "nested" / "doc.json", dict)

    assert await doc.read() == {}
    assert json.loads((tmp_path / "nested" / "doc.json").read_text()) == {}


@pytest.mark.anyio
async def test_transaction_writes_back_and_leaves_no_temp_files(tmp_path):
    doc = JsonDocument(tmp_path / "doc.json", list)

    async with doc.transaction() as rows:
        rows.append({"username": "שירה"})

    assert await doc.read() == [{"username": "שירה"}]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["doc.json"]


@pytest.mark.anyio
async def test_failed_transaction_writes_nothing(tmp_path):
    doc = JsonDocument(tmp_path / "doc.json", list)
    await doc.overwrite([1])

    with pytest.raises(RuntimeError):
        async with doc.transaction() as rows:
            rows.append(2)
            raise RuntimeError("boom")

    assert await doc.read() == [1]


@pytest.mark.anyio
async def test_concurrent_transactions_do_not_lose_updates(tmp_path):
    doc = JsonDocument(tmp_path / "doc.json", list)

    async def add(value):
        async with doc.transaction() as rows:
            await asyncio.sleep(0)
            rows.append(value)

    await asyncio.gather(*(add(i) for i in range(10)))

    assert sorted(await doc.read()) == list(range(10))


@pytest.mark.anyio
async def test_unreadable_document_raises_store_error(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreIOError):
        await JsonDocument(path, dict).read()


@pytest.mark.anyio
async def test_first_read_waits_for_a_running_transaction(tmp_path):
    path = tmp_path / "doc.json"
    doc = JsonDocument(path, list)
    entered = asyncio.Event()
    release = asyncio.Event()

    async def writer():
        async with doc.transaction() as rows:
            entered.set()
            await release.wait()
            rows.append("from-writer")

    writer_task = asyncio.create_task(writer())
    await entered.wait()
    path.unlink()

    reader_task = asyncio.create_task(doc.read())
    await asyncio.sleep(0.05)
    assert not reader_task.done()
    assert not path.exists()

    release.set()
    await writer_task
    assert await reader_task == ["from-writer"]
