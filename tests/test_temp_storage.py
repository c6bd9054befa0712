"""Tests for upload token minting, lookup and offset writes."""

import io

import pytest
from common.types import FileRecord
from server import temp_storage
from server.exceptions import ValidationError


@pytest.fixture
def temp_dir(tmp_path):
    directory = tmp_path / '.upload_tmp'
    directory.mkdir()
    return directory


def test_hash_file_name_is_alphanumeric_prefix():
    """Test name hash keeps only alphanumerics and is at most 16 chars."""
    name_hash = temp_storage.hash_file_name('a very long file name with spaces.tar.gz')
    assert name_hash.isalnum()
    assert len(name_hash) == 16


def test_hash_file_name_differs_per_name():
    """Test different names produce different hashes."""
    assert temp_storage.hash_file_name('a.bin') != temp_storage.hash_file_name('b.bin')


def test_mint_upload_creates_empty_file(temp_dir):
    """Test minting creates an empty temp file named after the token."""
    upload_id, path = temp_storage.mint_upload(temp_dir, 'movie.mkv', now_ms=1000)

    assert upload_id.startswith('temp_')
    assert upload_id.endswith('_1000')
    assert path == temp_dir / upload_id
    assert path.read_bytes() == b''


def test_mint_upload_same_millisecond_gets_distinct_files(temp_dir):
    """Test two uploads of the same name in the same millisecond do not share a file."""
    first_id, first_path = temp_storage.mint_upload(temp_dir, 'movie.mkv', now_ms=1000)
    second_id, second_path = temp_storage.mint_upload(temp_dir, 'movie.mkv', now_ms=1000)

    assert first_id != second_id
    assert second_id.endswith('_1001')
    assert first_path.exists() and second_path.exists()


def test_locate_upload_round_trip(temp_dir):
    """Test a minted token locates its own temp file."""
    upload_id, path = temp_storage.mint_upload(temp_dir, 'movie.mkv')
    assert temp_storage.locate_upload(temp_dir, upload_id, 'movie.mkv') == path


@pytest.mark.parametrize('upload_id', [None, '', 'temp_abc', '../../etc/passwd', 'temp_ab/c_1'])
def test_locate_upload_rejects_bad_tokens(temp_dir, upload_id):
    """Test missing or malformed tokens are rejected."""
    with pytest.raises(ValidationError):
        temp_storage.locate_upload(temp_dir, upload_id, 'movie.mkv')


def test_locate_upload_rejects_token_of_other_file(temp_dir):
    """Test a token cannot be used for a different file name."""
    upload_id, _ = temp_storage.mint_upload(temp_dir, 'movie.mkv')
    with pytest.raises(ValidationError):
        temp_storage.locate_upload(temp_dir, upload_id, 'other.mkv')


def test_compute_offset():
    """Test chunk offsets with and without declared chunk size."""
    assert temp_storage.compute_offset(0, 100, 100, False, 0) == 0
    assert temp_storage.compute_offset(2, 100, 40, True, 150) == 200
    assert temp_storage.compute_offset(3, None, 100, False, 0) == 300
    assert temp_storage.compute_offset(3, None, 40, True, 300) == 300


def test_write_at_is_idempotent(temp_dir):
    """Test rewriting the same chunk leaves the file unchanged."""
    _, path = temp_storage.mint_upload(temp_dir, 'data.bin')

    temp_storage.write_at(path, io.BytesIO(b'aaaa'), 0)
    temp_storage.write_at(path, io.BytesIO(b'bbbb'), 4)
    temp_storage.write_at(path, io.BytesIO(b'bbbb'), 4)

    assert path.read_bytes() == b'aaaabbbb'


def test_write_at_truncate_drops_stale_tail(temp_dir):
    """Test the final write cuts off anything beyond it."""
    _, path = temp_storage.mint_upload(temp_dir, 'data.bin')
    path.write_bytes(b'0123456789')

    written = temp_storage.write_at(path, io.BytesIO(b'xy'), 4, truncate=True)

    assert written == 2
    assert path.read_bytes() == b'0123xy'


def test_stream_length_rewinds():
    """Test stream length is measured without consuming the stream."""
    stream = io.BytesIO(b'hello')
    assert temp_storage.stream_length(stream) == 5
    assert stream.read() == b'hello'


def test_completion_marker_round_trip(temp_dir):
    """Test a stored record can be read back by upload id."""
    record = FileRecord(
        id='abc', name='a_1.bin', original_name='a.bin', size=3,
        mime_type='application/octet-stream', relative_path='/a_1.bin',
        uploaded_at='2024-01-01T00:00:00+00:00', size_formatted='3 B',
    )
    temp_storage.write_completion_marker(temp_dir, 'temp_YQ_1', record)

    assert temp_storage.read_completion_marker(temp_dir, 'temp_YQ_1') == record
    assert temp_storage.read_completion_marker(temp_dir, 'temp_YQ_2') is None


def test_unreadable_completion_marker_is_ignored(temp_dir):
    """Test a corrupted marker reads as no marker."""
    temp_storage.get_marker_path(temp_dir, 'temp_YQ_1').write_text('{not json')
    assert temp_storage.read_completion_marker(temp_dir, 'temp_YQ_1') is None
