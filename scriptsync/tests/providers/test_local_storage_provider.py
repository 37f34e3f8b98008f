"""Tests for the filesystem storage backend."""

import pytest

from scriptsync.exceptions import ProviderException, ResourceNotFoundException


class TestLocalStorageProvider:
    """Tests for LocalStorageProvider."""

    async def test_save_and_load_bytes(self, storage):
        name = await storage.save_bytes("u/p/c/thumbnail.jpg", b"jpeg", content_type="image/jpeg", folder_name="frames")

        assert name == "u/p/c/thumbnail.jpg"
        assert await storage.load_file_to_memory("frames", "u/p/c/thumbnail.jpg") == b"jpeg"

    async def test_save_file_and_download(self, storage, tmp_path):
        source = tmp_path / "source.mp4"
        source.write_bytes(b"video" * 1000)

        await storage.save_file("u/p/c.mp4", str(source), folder_name="clips")
        target = tmp_path / "work" / "copy.mp4"
        result = await storage.download_to_file("u/p/c.mp4", str(target), folder_name="clips")

        assert result == str(target)
        assert target.read_bytes() == source.read_bytes()

    async def test_missing_object(self, storage, tmp_path):
        with pytest.raises(ResourceNotFoundException, match="File not found: clips/nope.mp4"):
            await storage.download_to_file("nope.mp4", str(tmp_path / "x.mp4"), folder_name="clips")

        with pytest.raises(ResourceNotFoundException):
            await storage.load_file_to_memory("frames", "nope.jpg")

    async def test_path_escape_rejected(self, storage):
        with pytest.raises(ProviderException, match="escapes storage root"):
            await storage.load_file_to_memory("frames", "../../etc/passwd")

    async def test_missing_source_file_is_retried_then_raised(self, storage, tmp_path, sleep_mock):
        with pytest.raises(ProviderException):
            await storage.save_file("x.mp4", str(tmp_path / "absent.mp4"), folder_name="clips")
        assert sleep_mock.await_count == 2
