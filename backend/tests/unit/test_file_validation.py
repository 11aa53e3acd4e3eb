"""Unit tests for upload validation and local file storage"""

import io
import os

import pytest

from recovery_portal.documents.validation import (
    ACCEPTED_FILE_EXTENSIONS,
    is_accepted_extension,
    sanitize_filename,
    validate_file_size,
    validate_filename,
)
from recovery_portal.documents.storage import FileTooLargeError, LocalFileStorage


class TestExtensionValidation:
    """Test accepted upload extensions"""

    def test_accepted_extensions_include_videos(self):
        for ext in ('.mp4', '.mov', '.webm', '.mkv', '.m4v', '.avi', '.wmv'):
            assert ext in ACCEPTED_FILE_EXTENSIONS

    def test_documents_accepted(self):
        assert is_accepted_extension('letter.pdf') is True
        assert is_accepted_extension('ledger.XLSX') is True

    def test_executables_rejected(self):
        assert is_accepted_extension('invoice.exe') is False
        assert is_accepted_extension('script.sh') is False

    def test_no_extension_rejected(self):
        assert is_accepted_extension('README') is False


class TestFileSizeValidation:
    """Test file size validation"""

    def test_valid_file(self):
        assert validate_file_size(1024, max_size=2048) == (True, None)

    def test_empty_file(self):
        is_valid, error = validate_file_size(0, max_size=2048)
        assert is_valid is False
        assert 'empty' in error

    def test_file_at_limit(self):
        assert validate_file_size(2048, max_size=2048) == (True, None)

    def test_file_over_limit(self):
        is_valid, error = validate_file_size(2049, max_size=2048)
        assert is_valid is False
        assert 'maximum size of 2048' in error

    def test_default_limit_is_25mb(self):
        assert validate_file_size(25 * 1024 * 1024)[0] is True
        assert validate_file_size(25 * 1024 * 1024 + 1)[0] is False


class TestFilenameValidation:
    """Test filename validation and sanitization"""

    def test_valid_filename(self):
        assert validate_filename('doorstep-visit.mp4') == (True, None)

    @pytest.mark.parametrize('filename', ['', '   ', '../../etc/passwd', 'a/b.mp4', 'a\\b.mp4', 'bad\x00.mp4', 'bad\n.mp4'])
    def test_invalid_filenames(self, filename):
        is_valid, error = validate_filename(filename)
        assert is_valid is False
        assert error

    def test_too_long_filename(self):
        is_valid, error = validate_filename('a' * 252 + '.mp4')
        assert is_valid is False
        assert '255' in error

    def test_sanitize_replaces_spaces(self):
        assert sanitize_filename('bodycam clip.mp4') == 'bodycam_clip.mp4'

    def test_sanitize_strips_directories(self):
        assert sanitize_filename('/var/tmp/clip.mp4') == 'clip.mp4'

    def test_sanitize_truncates_keeping_extension(self):
        sanitized = sanitize_filename('a' * 300 + '.mp4')
        assert len(sanitized) == 255
        assert sanitized.endswith('.mp4')


class TestLocalFileStorage:
    """Test writing and deleting uploads on disk"""

    def test_store_file(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))

        stored = storage.store_file(io.BytesIO(b'video-bytes'), 7, 'Clip.MP4')

        assert stored.size_bytes == len(b'video-bytes')
        assert stored.file_path.startswith(os.path.join(str(tmp_path), '7'))
        assert stored.file_path.endswith('.mp4')
        with open(stored.file_path, 'rb') as f:
            assert f.read() == b'video-bytes'

    def test_store_file_names_are_unique(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))

        first = storage.store_file(io.BytesIO(b'1'), 7, 'clip.mp4')
        second = storage.store_file(io.BytesIO(b'2'), 7, 'clip.mp4')

        assert first.file_path != second.file_path

    def test_store_file_too_large_removes_partial(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path), max_size=10)

        with pytest.raises(FileTooLargeError):
            storage.store_file(io.BytesIO(b'x' * 11), 7, 'clip.mp4')

        assert os.listdir(tmp_path / '7') == []

    def test_delete_file(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        stored = storage.store_file(io.BytesIO(b'data'), 7, 'a.pdf')

        assert storage.delete_file(stored.file_path) is True
        assert not os.path.exists(stored.file_path)

    def test_delete_missing_file(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))

        assert storage.delete_file(str(tmp_path / 'missing.pdf')) is False
