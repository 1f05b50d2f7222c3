"""Tests for the filesystem blob store."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from smolpaste.error_handling import ErrorCode, SmolpasteError
from smolpaste.implementations.filesystem_blob_store import FileSystemBlobStore
from smolpaste.tests.helpers import chunked


@pytest.fixture
async def store(tmp_path: Path) -> FileSystemBlobStore:
    blob_store = FileSystemBlobStore(tmp_path / "nested" / "pastes", max_upload_bytes=1024)
    await blob_store.ensure_directory()
    return blob_store


async def test_ensure_directory_is_idempotent(store: FileSystemBlobStore) -> None:
    await store.ensure_directory()

    assert store.root.is_dir()
    assert store.root.is_absolute()


async def test_create_and_remove(store: FileSystemBlobStore) -> None:
    written = await store.create("abc.txt", chunked(b"hello world", 3))

    assert written == 11
    assert (store.root / "abc.txt").read_bytes() == b"hello world"

    await store.remove("abc.txt")

    assert not (store.root / "abc.txt").exists()


async def test_create_refuses_existing_file(store: FileSystemBlobStore) -> None:
    (store.root / "taken").write_bytes(b"keep me")

    with pytest.raises(SmolpasteError) as exc_info:
        await store.create("taken", chunked(b"new", 1))

    assert exc_info.value.error_detail.error_code == ErrorCode.IO_ERROR
    assert (store.root / "taken").read_bytes() == b"keep me"


async def test_oversized_upload_leaves_no_file(store: FileSystemBlobStore) -> None:
    with pytest.raises(SmolpasteError) as exc_info:
        await store.create("big", chunked(b"x" * 2048, 100))

    assert exc_info.value.status_code == 413
    assert list(store.root.iterdir()) == []


async def test_stream_failure_leaves_no_file(store: FileSystemBlobStore) -> None:
    async def broken():
        yield b"partial"
        raise ValueError("Multipart body ended unexpectedly")

    with pytest.raises(SmolpasteError) as exc_info:
        await store.create("partial", broken())

    assert exc_info.value.error_detail.error_code == ErrorCode.IO_ERROR
    assert list(store.root.iterdir()) == []


async def test_cancelled_upload_leaves_no_file(store: FileSystemBlobStore) -> None:
    started = asyncio.Event()

    async def stalled():
        yield b"first chunk"
        started.set()
        await asyncio.sleep(3600)
        yield b"never"

    task = asyncio.create_task(store.create("stalled", stalled()))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert list(store.root.iterdir()) == []


async def test_remove_missing_file_is_io_error(store: FileSystemBlobStore) -> None:
    with pytest.raises(SmolpasteError) as exc_info:
        await store.remove("missing")

    assert exc_info.value.error_detail.error_code == ErrorCode.IO_ERROR


async def test_discard_missing_file_is_silent(store: FileSystemBlobStore) -> None:
    await store.discard("missing")
