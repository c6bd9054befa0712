"""Tests for NasCompleter."""

import pytest
from pathlib import Path
from unittest.mock import patch

from prompt_toolkit.document import Document

from cli.completer import NasCompleter
from cli.constants import COMMANDS


@pytest.fixture
def local_dir(tmp_path):
    """
    Create a directory of local files to complete against.

    Returns:
        Path to the directory
    """
    (tmp_path / "movie.mkv").write_text("content")
    (tmp_path / "music.mp3").write_text("content")
    (tmp_path / "notes.txt").write_text("content")
    (tmp_path / ".hidden").write_text("content")
    photos = tmp_path / "photos"
    photos.mkdir()
    (photos / "cat.png").write_text("content")
    return tmp_path


@pytest.fixture
def completer(local_dir):
    """Create a NasCompleter rooted at the local directory."""
    return NasCompleter(base_dir=local_dir)


def get_completions_list(completer, text):
    """Helper to get list of completion texts from completer."""
    doc = Document(text, len(text))
    return [c.text for c in completer.get_completions(doc, None)]


class TestCommandCompletion:
    """Tests for command name completion."""

    def test_empty_input_shows_all_commands(self, completer):
        """Empty input should suggest all commands."""
        completions = get_completions_list(completer, "")
        for cmd in COMMANDS:
            assert cmd in completions

    def test_partial_command_filters(self, completer):
        """Partial command should filter to matching commands."""
        completions = get_completions_list(completer, "c")
        assert completions == ["cleanup", "clear"]

    def test_command_completion_case_insensitive(self, completer):
        """Command completion should be case insensitive."""
        assert get_completions_list(completer, "UP") == ["upload"]


class TestFileCompletion:
    """Tests for local path completion in upload command."""

    def test_upload_lists_local_entries(self, completer):
        """After 'upload ', visible files and directories are offered."""
        completions = get_completions_list(completer, "upload ")
        assert completions == ["movie.mkv", "music.mp3", "notes.txt", "photos/"]

    def test_partial_name_filters(self, completer):
        completions = get_completions_list(completer, "upload m")
        assert completions == ["movie.mkv", "music.mp3"]

    def test_hidden_files_need_leading_dot(self, completer):
        assert get_completions_list(completer, "upload .") == [".hidden"]

    def test_completes_inside_directories(self, completer):
        """A partial path with a directory completes inside it."""
        assert get_completions_list(completer, "upload photos/c") == ["photos/cat.png"]

    def test_defaults_to_working_directory(self, local_dir):
        """Without a base directory the working directory is used."""
        with patch.object(Path, "cwd", return_value=local_dir):
            completions = get_completions_list(NasCompleter(), "upload n")
        assert completions == ["notes.txt"]

    def test_flag_completion(self, completer):
        assert get_completions_list(completer, "upload movie.mkv --") == ["--to"]

    def test_no_completion_for_remote_directory(self, completer):
        """The remote destination after --to is not a local path."""
        assert get_completions_list(completer, "upload movie.mkv --to ") == []
        assert get_completions_list(completer, "upload movie.mkv --to /Vi") == []

    def test_other_commands_no_file_completion(self, completer):
        assert get_completions_list(completer, "status ") == []

    def test_missing_directory_yields_nothing(self, completer):
        assert get_completions_list(completer, "upload nowhere/x") == []
