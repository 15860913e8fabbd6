import asyncio
import base64

import pytest

from treegrab.infrastructure.error_handler import DecodeError, FilesystemError
from treegrab.services.download import DownloadService, decode_blob_content


def test_decode_base64_with_embedded_newlines():
    encoded = base64.b64encode(b"hello world, this is a test payload").decode()
    wrapped = encoded[:10] + "\n" + encoded[10:] + "\n"

    assert decode_blob_content(wrapped, "base64") == b"hello world, this is a test payload"


def test_decode_empty_content():
    assert decode_blob_content("", "base64") == b""


@pytest.mark.parametrize("content", ["abc", "a$b=", "####"])
def test_decode_malformed_base64(content):
    with pytest.raises(DecodeError):
        decode_blob_content(content, "base64")


def test_decode_unknown_encoding():
    with pytest.raises(DecodeError, match="Unsupported blob encoding"):
        decode_blob_content("abc", "rot13")


@pytest.mark.asyncio
async def test_save_content_creates_parents(tmp_path):
    service = DownloadService()
    target = tmp_path / "a" / "b" / "c.bin"

    written = await service.save_content(b"\x00\x01\x02", target)

    assert written == 3
    assert target.read_bytes() == b"\x00\x01\x02"


@pytest.mark.asyncio
async def test_ensure_directory_is_idempotent(tmp_path):
    service = DownloadService()

    await service.ensure_directory(tmp_path / "x" / "y")
    await service.ensure_directory(tmp_path / "x" / "y")

    assert (tmp_path / "x" / "y").is_dir()


@pytest.mark.asyncio
async def test_concurrent_siblings_share_ancestor(tmp_path):
    service = DownloadService()

    await asyncio.gather(*(
        service.save_content(str(i).encode(), tmp_path / "shared" / "deep" / f"{i}.txt")
        for i in range(20)
    ))

    assert sorted(p.name for p in (tmp_path / "shared" / "deep").iterdir()) == sorted(f"{i}.txt" for i in range(20))


@pytest.mark.asyncio
async def test_ensure_directory_over_file_fails(tmp_path):
    (tmp_path / "blocker").write_text("x")

    with pytest.raises(FilesystemError) as excinfo:
        await DownloadService().ensure_directory(tmp_path / "blocker" / "child")

    assert isinstance(excinfo.value.original_error, OSError)
