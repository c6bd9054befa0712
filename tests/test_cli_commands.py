"""Tests for CLI command handlers."""

from unittest.mock import ANY, Mock

from cli.commands import handle_cleanup, handle_status, handle_upload
from cli.exceptions import BatchUploadError, NetworkError
from cli.models import CleanupCommand, StatusCommand, UploadCommand
from cli.nas_client import NasClient
from common.types import FileRecord


def _record(name, original_name=None):
    return FileRecord(
        id='id1', name=name, original_name=original_name or name, size=2048,
        mime_type='text/plain', relative_path=f'/Docs/{name}',
        uploaded_at='2024-01-01T00:00:00+00:00', size_formatted='2 KB',
    )


def test_handle_upload():
    """Test upload command handler with mocked client."""
    mock_client = Mock(spec=NasClient)
    mock_client.upload_files.return_value = [_record('a.txt'), _record('b_1.txt', 'b.txt')]

    cmd = UploadCommand(file_list=('a.txt', 'b.txt'), upload_path='/Docs')
    result = handle_upload(cmd, client=mock_client)

    assert 'Uploaded: /Docs/a.txt (2 KB)' in result
    assert 'renamed from b.txt' in result
    mock_client.upload_files.assert_called_once_with(['a.txt', 'b.txt'], '/Docs', on_progress=ANY)


def test_handle_upload_partial_failure():
    """Test a batch failure lists both successes and failures."""
    mock_client = Mock(spec=NasClient)
    mock_client.upload_files.side_effect = BatchUploadError(
        [_record('a.txt')], {'b.txt': 'Chunk 1 failed after 3 attempts: disk hiccup'}
    )

    result = handle_upload(UploadCommand(file_list=('a.txt', 'b.txt')), client=mock_client)

    assert 'Uploaded: /Docs/a.txt' in result
    assert 'Error: b.txt: Chunk 1 failed after 3 attempts' in result
    assert 'Some files failed to upload (1 of 2 failed)' in result


def test_handle_status():
    """Test status output shows server configuration."""
    mock_client = Mock(spec=NasClient)
    mock_client.get_status.return_value = {
        'message': 'Upload endpoint is working',
        'config': {
            'storagePath': '/srv/nas',
            'maxFileSize': '100MB',
            'maxTotalUploads': '10GB',
            'maxFilesCount': 1000,
            'chunkSize': '5MB',
        },
        'storageAccessible': True,
    }

    result = handle_status(StatusCommand(), client=mock_client)

    assert 'Storage path: /srv/nas (accessible: yes)' in result
    assert 'Server chunk size: 5MB' in result


def test_handle_status_network_error():
    """Test connection problems are reported, not raised."""
    mock_client = Mock(spec=NasClient)
    mock_client.get_status.side_effect = NetworkError('Cannot connect to NAS server. Is it running?')

    assert handle_status(StatusCommand(), client=mock_client).startswith('Error: Cannot connect')


def test_handle_cleanup():
    """Test cleanup passes the max age through."""
    mock_client = Mock(spec=NasClient)
    mock_client.cleanup.return_value = 2

    result = handle_cleanup(CleanupCommand(max_age_seconds=60), client=mock_client)

    assert result == 'Cleanup completed, removed 2 temp file(s)'
    mock_client.cleanup.assert_called_once_with(60)
