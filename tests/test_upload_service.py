"""Tests for the upload service: whole files and chunk reassembly."""

import io

import pytest
from common.constants import COMPLETION_MARKER_SUFFIX
from server.exceptions import (
    InvalidPathError,
    StorageIOError,
    StorageUnavailableError,
    UploadSessionNotFoundError,
    ValidationError,
)
from server.services.upload_service import UploadService
from server.types import ChunkRequest, IncomingFile


@pytest.fixture
def service(storage_root):
    return UploadService(str(storage_root))


def _chunk(data, index, total, upload_id=None, chunk_size=4, file_name='data.bin', upload_path='/'):
    return ChunkRequest(
        stream=io.BytesIO(data),
        chunk_index=index,
        total_chunks=total,
        file_name=file_name,
        upload_path=upload_path,
        upload_id=upload_id,
        chunk_size=chunk_size,
    )


def _send_all(service, data, chunk_size=4, **kwargs):
    pieces = [data[i:i + chunk_size] for i in range(0, len(data), chunk_size)]
    upload_id = None
    result = None
    for index, piece in enumerate(pieces):
        result = service.upload_chunk(_chunk(piece, index, len(pieces), upload_id, chunk_size, **kwargs))
        upload_id = result.upload_id
    return result


def test_upload_whole_files(service, storage_root):
    """Test several whole files land in the destination directory."""
    files = [
        IncomingFile(file_name='a.txt', stream=io.BytesIO(b'alpha'), content_type='text/plain'),
        IncomingFile(file_name='b.txt', stream=io.BytesIO(b'beta'), content_type='text/plain'),
    ]

    result = service.upload_files(files, '/Documents')

    assert result.upload_path == '/Documents'
    assert [r.name for r in result.files] == ['a.txt', 'b.txt']
    assert (storage_root / 'Documents' / 'a.txt').read_bytes() == b'alpha'
    assert (storage_root / 'Documents' / 'b.txt').read_bytes() == b'beta'


def test_upload_empty_file(service, storage_root):
    """Test a zero-byte file is stored as such."""
    result = service.upload_files([IncomingFile(file_name='empty', stream=io.BytesIO(b''))])

    assert result.files[0].size == 0
    assert (storage_root / 'empty').read_bytes() == b''


def test_upload_no_files(service):
    """Test an empty file list is rejected."""
    with pytest.raises(ValidationError):
        service.upload_files([])


def test_chunked_upload_reassembles(service, storage_root):
    """Test chunks are joined in order into one file of the original size."""
    data = b'0123456789ab'
    result = _send_all(service, data)

    assert result.completed
    assert result.record.size == len(data)
    assert (storage_root / 'data.bin').read_bytes() == data
    leftovers = [
        p.name for p in (storage_root / '.upload_tmp').iterdir()
        if not p.name.endswith(COMPLETION_MARKER_SUFFIX)
    ]
    assert leftovers == []


def test_non_final_chunk_reports_progress(service):
    """Test non-final chunks are acknowledged without a record."""
    result = service.upload_chunk(_chunk(b'0123', 0, 3))

    assert not result.completed
    assert result.record is None
    assert result.upload_id.startswith('temp_')


def test_duplicate_chunk_is_idempotent(service, storage_root):
    """Test delivering a middle chunk twice does not corrupt the file."""
    first = service.upload_chunk(_chunk(b'0123', 0, 3))
    service.upload_chunk(_chunk(b'4567', 1, 3, first.upload_id))
    service.upload_chunk(_chunk(b'4567', 1, 3, first.upload_id))
    result = service.upload_chunk(_chunk(b'89', 2, 3, first.upload_id))

    assert (storage_root / 'data.bin').read_bytes() == b'0123456789'
    assert result.record.size == 10


def test_repeated_final_chunk_returns_same_record(service, storage_root):
    """Test a repeated final chunk neither fails nor creates a second file."""
    first = service.upload_chunk(_chunk(b'0123', 0, 2))
    done = service.upload_chunk(_chunk(b'45', 1, 2, first.upload_id))
    again = service.upload_chunk(_chunk(b'45', 1, 2, first.upload_id))

    assert again.completed
    assert again.record == done.record
    assert sorted(p.name for p in storage_root.iterdir() if p.is_file()) == ['data.bin']


def test_concurrent_uploads_of_same_name_are_isolated(service, storage_root):
    """Test two interleaved uploads of one name produce two correct files."""
    a0 = service.upload_chunk(_chunk(b'AAAA', 0, 2))
    b0 = service.upload_chunk(_chunk(b'BBBB', 0, 2))
    assert a0.upload_id != b0.upload_id

    a1 = service.upload_chunk(_chunk(b'aa', 1, 2, a0.upload_id))
    b1 = service.upload_chunk(_chunk(b'bb', 1, 2, b0.upload_id))

    assert a1.record.name == 'data.bin'
    assert b1.record.name == 'data_1.bin'
    assert (storage_root / 'data.bin').read_bytes() == b'AAAAaa'
    assert (storage_root / 'data_1.bin').read_bytes() == b'BBBBbb'


def test_later_chunk_without_upload_id(service):
    """Test chunks after the first must echo the upload id."""
    with pytest.raises(ValidationError):
        service.upload_chunk(_chunk(b'4567', 1, 3))


def test_unknown_upload_id(service):
    """Test a well-formed id without a temp file is a missing session."""
    first = service.upload_chunk(_chunk(b'0123', 0, 3))
    stale_id = first.upload_id[:-1] + ('0' if first.upload_id[-1] != '0' else '1')

    with pytest.raises(UploadSessionNotFoundError):
        service.upload_chunk(_chunk(b'4567', 1, 3, stale_id))


@pytest.mark.parametrize('index,total', [(-1, 3), (3, 3), (0, 0)])
def test_chunk_metadata_out_of_range(service, index, total):
    """Test invalid chunk index or count is rejected."""
    with pytest.raises(ValidationError):
        service.upload_chunk(_chunk(b'0123', index, total))


def test_chunk_length_must_match_chunk_size(service):
    """Test a short non-final chunk is rejected."""
    with pytest.raises(ValidationError):
        service.upload_chunk(_chunk(b'01', 0, 3))


def test_traversal_path_rejected(service, tmp_path):
    """Test destinations outside the storage root are rejected."""
    with pytest.raises(InvalidPathError):
        service.upload_files([IncomingFile(file_name='x', stream=io.BytesIO(b'x'))], '../outside')
    assert not (tmp_path / 'outside').exists()


def test_temp_dir_is_not_a_destination(service):
    """Test uploads cannot target the temp directory."""
    with pytest.raises(InvalidPathError):
        service.upload_files([IncomingFile(file_name='x', stream=io.BytesIO(b'x'))], '/.upload_tmp')


def test_file_name_is_reduced_to_base_name(service, storage_root):
    """Test directory parts in a file name are dropped."""
    result = service.upload_files([IncomingFile(file_name='../../evil.sh', stream=io.BytesIO(b'x'))])

    assert result.files[0].relative_path == '/evil.sh'
    assert (storage_root / 'evil.sh').exists()


def test_missing_storage_root(tmp_path):
    """Test a missing storage directory is reported as unavailable."""
    service = UploadService(str(tmp_path / 'missing'))
    with pytest.raises(StorageUnavailableError):
        service.upload_files([IncomingFile(file_name='x', stream=io.BytesIO(b'x'))])


def test_final_chunk_after_missing_chunk_rejected(service, storage_root):
    """Test a final chunk past the received bytes is refused and nothing is promoted."""
    first = service.upload_chunk(_chunk(b'AAAA', 0, 3))

    with pytest.raises(ValidationError):
        service.upload_chunk(_chunk(b'CC', 2, 3, first.upload_id))

    assert not (storage_root / 'data.bin').exists()
    assert (storage_root / '.upload_tmp' / first.upload_id).stat().st_size == 4


def test_missing_chunk_can_be_resent(service, storage_root):
    """Test an upload rejected for a gap completes once the missing chunk arrives."""
    first = service.upload_chunk(_chunk(b'AAAA', 0, 3))
    with pytest.raises(ValidationError):
        service.upload_chunk(_chunk(b'CC', 2, 3, first.upload_id))

    service.upload_chunk(_chunk(b'BBBB', 1, 3, first.upload_id))
    result = service.upload_chunk(_chunk(b'CC', 2, 3, first.upload_id))

    assert result.completed
    assert (storage_root / 'data.bin').read_bytes() == b'AAAABBBBCC'


def test_middle_chunk_past_end_rejected(service):
    """Test a non-final chunk cannot leave a hole either."""
    first = service.upload_chunk(_chunk(b'AAAA', 0, 4))

    with pytest.raises(ValidationError):
        service.upload_chunk(_chunk(b'CCCC', 2, 4, first.upload_id))


class _BrokenStream(io.BytesIO):
    def read(self, *args):
        raise OSError(5, 'Input/output error')


def test_failed_write_stores_no_file_from_batch(service, storage_root):
    """Test a batch whose second file cannot be written leaves the destination empty."""
    files = [
        IncomingFile(file_name='a.txt', stream=io.BytesIO(b'alpha')),
        IncomingFile(file_name='b.txt', stream=_BrokenStream(b'beta')),
    ]

    with pytest.raises(StorageIOError):
        service.upload_files(files)

    assert not (storage_root / 'a.txt').exists()
    assert not (storage_root / 'b.txt').exists()
    assert list((storage_root / '.upload_tmp').iterdir()) == []
