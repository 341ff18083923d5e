"""
Unit tests for the in-memory archive container.

Tests cover:
- Writing members and streams
- Forward-only reading
- Skipping members
- Simulated write failures
"""

import pytest

from openbook.backup_archive.container import (
    ArchiveReader,
    ArchiveWriter,
    InMemoryArchive,
)


class TestInMemoryArchiveWriter:
    """Tests for InMemoryArchiveWriter."""

    @pytest.fixture
    def archive(self):
        """Create an empty archive."""
        return InMemoryArchive()

    def test_implements_protocol(self, archive):
        """Writer and reader satisfy the container protocols."""
        assert isinstance(archive.open_write(), ArchiveWriter)
        assert isinstance(archive.open_read(), ArchiveReader)

    def test_write_member(self, archive):
        """Members are stored in write order."""
        with archive.open_write() as writer:
            assert writer.write_member("[HDR] BackupProps", b"{}")
            assert writer.write_member("[DAT] entries", b"abc")

        assert archive.names == ["[HDR] BackupProps", "[DAT] entries"]
        assert archive.members[1].data == b"abc"
        assert archive.members[1].mode == 0o644

    def test_write_stream(self, archive):
        """Streamed chunks are concatenated."""
        with archive.open_write() as writer:
            assert writer.write_stream("[DAT] entries", [b"ab", b"c1", b"23"])

        assert bytes(archive.members[0].data) == b"abc123"

    def test_duplicate_name_fails(self, archive):
        """A name can only be written once per session."""
        with archive.open_write() as writer:
            writer.write_member("[DAT] entries", b"a")

            assert not writer.write_member("[DAT] entries", b"b")
            assert "duplicate" in writer.last_error

    def test_write_after_close_fails(self, archive):
        """A closed handle refuses writes."""
        writer = archive.open_write()
        writer.close()

        assert not writer.write_member("[DAT] entries", b"a")
        assert "closed" in writer.last_error

    def test_simulated_failure_keeps_earlier_members(self):
        """A failed member keeps its partial bytes and earlier members."""
        archive = InMemoryArchive(fail_on="[DAT] entries")

        with archive.open_write() as writer:
            assert writer.write_member("[HDR] BackupProps", b"{}")
            assert not writer.write_member("[DAT] entries", b"abcdef")
            assert writer.last_error == "[DAT] entries: simulated write failure"

        assert archive.names == ["[HDR] BackupProps", "[DAT] entries"]
        assert archive.members[1].data == b"abc"

    def test_open_write_discards_members(self, archive):
        """A new write session starts from an empty archive."""
        with archive.open_write() as writer:
            writer.write_member("[DAT] old", b"x")
        with archive.open_write() as writer:
            writer.write_member("[DAT] new", b"y")

        assert archive.names == ["[DAT] new"]


class TestInMemoryArchiveReader:
    """Tests for InMemoryArchiveReader."""

    @pytest.fixture
    def archive(self):
        """Create an archive with three members."""
        archive = InMemoryArchive()
        with archive.open_write() as writer:
            writer.write_member("[HDR] BackupProps", b'{"userid":"alice"}')
            writer.write_member("[HDR] DossierProps", b"{}")
            writer.write_member("[DAT] entries", b"abc123")
        return archive

    def test_entries_in_order(self, archive):
        """next_entry walks members in write order, then returns None."""
        with archive.open_read() as reader:
            names = []
            while (entry := reader.next_entry()) is not None:
                names.append(entry.name)

            assert reader.next_entry() is None

        assert names == archive.names

    def test_entry_metadata(self, archive):
        """Entries report name, size and mode."""
        with archive.open_read() as reader:
            entry = reader.next_entry()

        assert entry.name == "[HDR] BackupProps"
        assert entry.size == len(b'{"userid":"alice"}')
        assert entry.mode == 0o644

    def test_read_exact(self, archive):
        """read_exact consumes the current member."""
        with archive.open_read() as reader:
            reader.next_entry()
            assert reader.read_exact(4) == b'{"us'
            assert reader.read_exact(100) == b'erid":"alice"}'
            assert reader.read_exact(1) == b""

    def test_readinto(self, archive):
        """readinto fills the buffer and reports the count."""
        buffer = bytearray(4)
        with archive.open_read() as reader:
            for _ in range(3):
                entry = reader.next_entry()

            assert entry.name == "[DAT] entries"
            assert reader.readinto(buffer) == 4
            assert buffer == b"abc1"
            assert reader.readinto(buffer) == 2
            assert buffer[:2] == b"23"
            assert reader.readinto(buffer) == 0

    def test_skip_is_final(self, archive):
        """Skipped bytes cannot be read on the same handle."""
        with archive.open_read() as reader:
            reader.next_entry()
            reader.skip_current()

            assert reader.read_exact(10) == b""

    def test_read_before_first_entry(self, archive):
        """No data is available before next_entry."""
        with archive.open_read() as reader:
            assert reader.read_exact(10) == b""

    def test_closed_reader(self, archive):
        """A closed reader has no more entries."""
        reader = archive.open_read()
        reader.close()

        assert reader.next_entry() is None
