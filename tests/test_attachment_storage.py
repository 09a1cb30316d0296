"""
Тесты для хранилища вложений сделок
"""

import pytest

from modules.crm.deals.attachment_storage import AttachmentStorage


@pytest.fixture
def storage(tmp_path):
    return AttachmentStorage(tmp_path / "attachments")


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "contract.pdf"
    path.write_bytes(b"%PDF-1.4")
    return path


class TestAttachmentStorage:
    """Тесты для файлового хранилища"""

    def test_list_missing_container(self, storage):
        assert storage.list_attachments(1) == []

    def test_add_and_list(self, storage, source_file):
        attachment = storage.add_attachment(7, source_file)

        assert attachment.name == "contract.pdf"
        assert attachment.path.read_bytes() == b"%PDF-1.4"
        assert [a.name for a in storage.list_attachments(7)] == ["contract.pdf"]
        assert source_file.exists()

    def test_add_missing_source(self, storage, tmp_path):
        with pytest.raises(FileNotFoundError):
            storage.add_attachment(1, tmp_path / "nope.pdf")

    def test_delete_attachment_is_tolerant(self, storage, source_file, tmp_path):
        attachment = storage.add_attachment(3, source_file)
        assert storage.delete_attachment(attachment.path) is True
        assert not attachment.path.exists()
        assert storage.delete_attachment(tmp_path / "already-gone.pdf") is True

    def test_remove_container(self, storage, source_file):
        storage.add_attachment(5, source_file)
        assert storage.remove_container(5) == storage.container_path(5)
        assert not storage.container_path(5).exists()
        assert storage.remove_container(5) is None

    def test_containers_are_per_deal(self, storage, source_file):
        storage.add_attachment(1, source_file)
        storage.ensure_container(2)
        assert storage.list_attachments(2) == []
        assert len(storage.list_attachments(1)) == 1
