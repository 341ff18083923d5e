"""
Unit tests for backup format detection.

Tests cover:
- Magic byte classification
- Sniffing files on disk
- Unreadable paths
"""

import gzip
import zipfile

from openbook.backup_archive.formats import BackupFormat, detect_format, format_from_magic


class TestFormatFromMagic:
    """Tests for format_from_magic."""

    def test_zip(self):
        """Local file header and empty archive magic are ZIP."""
        assert format_from_magic(b"PK\x03\x04rest") is BackupFormat.ZIP
        assert format_from_magic(b"PK\x05\x06") is BackupFormat.ZIP

    def test_gzip(self):
        """Gzip magic is the legacy format."""
        assert format_from_magic(b"\x1f\x8b\x08\x00") is BackupFormat.GZ

    def test_unknown(self):
        """Anything else is unknown."""
        assert format_from_magic(b"") is BackupFormat.UNKNOWN
        assert format_from_magic(b"{}") is BackupFormat.UNKNOWN

    def test_values_are_stable(self):
        """Enum values are persisted by callers."""
        assert BackupFormat.UNKNOWN == 0
        assert BackupFormat.GZ == 1
        assert BackupFormat.ZIP == 2

    def test_properties(self):
        """Only ZIP is supported, only GZ is legacy."""
        assert BackupFormat.ZIP.is_supported
        assert not BackupFormat.GZ.is_supported
        assert BackupFormat.GZ.is_legacy
        assert not BackupFormat.ZIP.is_legacy


class TestDetectFormat:
    """Tests for detect_format."""

    def test_zip_file(self, tmp_path):
        """A zip archive is detected as ZIP."""
        path = tmp_path / "backup.zip"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("[DAT] entries", b"abc")

        assert detect_format(path) is BackupFormat.ZIP

    def test_gzip_file(self, tmp_path):
        """A gzip dump is detected as GZ."""
        path = tmp_path / "backup.gz"
        with gzip.open(path, "wb") as f:
            f.write(b"dump")

        assert detect_format(path) is BackupFormat.GZ

    def test_missing_file(self, tmp_path):
        """A missing file is UNKNOWN, not an error."""
        assert detect_format(tmp_path / "missing.zip") is BackupFormat.UNKNOWN
