"""Tests for artifact location helpers."""

from __future__ import annotations

from pathlib import Path

from cachevars.core.io import artifact_exists, as_location, ensure_parent_dirs, format_tag


class TestAsLocation:
    """Tests for location normalization."""

    def test_none_is_sentinel(self):
        """Test None passes through as the no-caching sentinel."""
        assert as_location(None) is None

    def test_string_becomes_path(self):
        """Test strings are converted to Path."""
        assert as_location("results/run.pkl") == Path("results/run.pkl")

    def test_home_is_expanded(self, monkeypatch, tmp_path: Path):
        """Test ~ expands to the user's home directory."""
        monkeypatch.setenv("HOME", str(tmp_path))

        assert as_location("~/run.pkl") == tmp_path / "run.pkl"


class TestFormatTag:
    """Tests for suffix extraction."""

    def test_lowercases_suffix(self):
        """Test the tag is the lower-cased last suffix."""
        assert format_tag(Path("a/b.tar.H5")) == ".h5"

    def test_no_suffix(self):
        """Test a bare name has an empty tag."""
        assert format_tag(Path("results/run")) == ""


class TestFilesystem:
    """Tests for existence checks and directory creation."""

    def test_artifact_exists(self, tmp_path: Path):
        """Test existence reflects the filesystem."""
        path = tmp_path / "run.pkl"
        assert not artifact_exists(path)

        path.touch()

        assert artifact_exists(path)

    def test_ensure_parent_dirs_creates_chain(self, tmp_path: Path):
        """Test every missing ancestor is created."""
        path = tmp_path / "a" / "b" / "run.pkl"

        ensure_parent_dirs(path)

        assert path.parent.is_dir()
        assert not path.exists()

    def test_ensure_parent_dirs_is_idempotent(self, tmp_path: Path):
        """Test existing directories are left alone."""
        path = tmp_path / "run.pkl"

        ensure_parent_dirs(path)
        ensure_parent_dirs(path)

        assert tmp_path.is_dir()
