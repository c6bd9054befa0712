"""Shared pytest fixtures for client and server tests."""

from pathlib import Path

import pytest
from cli.config import Config
from server import config as server_config


@pytest.fixture
def temp_config(tmp_path):
    """Client Config backed by a throwaway ~/.lannas/config.json."""
    return Config(tmp_path / '.lannas' / 'config.json')


@pytest.fixture
def storage_root(tmp_path, monkeypatch):
    """
    Point the server at an empty storage directory.

    Routes and the reaper read ``server.config.STORAGE_PATH`` per request,
    so patching the module attribute is enough.
    """
    root = tmp_path / 'storage'
    root.mkdir()
    monkeypatch.setattr(server_config, 'STORAGE_PATH', str(root))
    return root


@pytest.fixture
def sample_file(tmp_path):
    """Small text file that is always sent in a single request."""
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing')
    return file_path


@pytest.fixture
def multiple_sample_files(tmp_path):
    """Three small text files test0.txt .. test2.txt."""
    paths = [tmp_path / f'test{i}.txt' for i in range(3)]
    for i, path in enumerate(paths):
        path.write_text(f'Sample content {i}')
    return paths


@pytest.fixture
def make_binary_file(tmp_path):
    """
    Factory writing files of a given size under tmp_path.

    The 251-byte pattern does not line up with chunk boundaries, so
    misplaced chunks change the content.
    """
    def _make(name: str, size: int) -> Path:
        path = tmp_path / name
        pattern = bytes(range(251))
        path.write_bytes((pattern * (size // len(pattern) + 1))[:size])
        return path
    return _make
