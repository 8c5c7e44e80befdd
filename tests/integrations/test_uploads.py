"""Tests for the local upload store."""

import base64

import pytest

from procflow.domain.errors import UploadFailure
from procflow.integrations.uploads import LocalUploadStore, assign_name, decode_content

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


class TestDecodeContent:
    """Tests for decode_content."""

    def test_data_url(self):
        assert decode_content(PNG_DATA_URL) == (PNG_BYTES, "image/png")

    def test_bare_base64(self):
        assert decode_content(base64.b64encode(b"hello").decode()) == (b"hello", None)

    def test_non_base64_data_url(self):
        with pytest.raises(UploadFailure):
            decode_content("data:text/plain,hello")

    def test_invalid_base64(self):
        with pytest.raises(UploadFailure):
            decode_content("not base64!")


class TestAssignName:
    """Tests for stored names."""

    def test_keeps_safe_extension(self):
        assert assign_name("照片.PNG").endswith(".png")

    def test_drops_unsafe_extension(self):
        assert "." not in assign_name("evil.p/hp")

    def test_names_are_unique(self):
        assert assign_name("a.png") != assign_name("a.png")


class TestLocalUploadStore:
    """Tests for LocalUploadStore."""

    @pytest.mark.asyncio
    async def test_upload_writes_file(self, tmp_path):
        store = LocalUploadStore(str(tmp_path / "uploads"))

        result = await store.upload("故障.png", PNG_DATA_URL, "image/png")

        assert result.filename.endswith(".png")
        assert (tmp_path / "uploads" / result.filename).read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_empty_upload(self, tmp_path):
        with pytest.raises(UploadFailure):
            await LocalUploadStore(str(tmp_path)).upload("a.txt", "")

    @pytest.mark.asyncio
    async def test_too_large(self, tmp_path):
        store = LocalUploadStore(str(tmp_path), max_bytes=4)
        with pytest.raises(UploadFailure):
            await store.upload("a.png", PNG_DATA_URL)

    @pytest.mark.asyncio
    async def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        store = LocalUploadStore(str(blocker / "uploads"))

        with pytest.raises(UploadFailure):
            await store.upload("a.png", PNG_DATA_URL)
