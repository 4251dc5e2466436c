"""Tests for the error taxonomy."""

from shared.errors import (
    CacheReadCorruptError,
    CacheWriteError,
    FetchFailedError,
    InvalidIndexError,
    SchemaConfigurationError,
    TileError,
    TileNotFoundError,
)


class TestErrors:
    """Every error is a TileError and keeps its details."""

    def test_hierarchy(self):
        for cls in (
            CacheReadCorruptError,
            CacheWriteError,
            FetchFailedError,
            InvalidIndexError,
            SchemaConfigurationError,
            TileNotFoundError,
        ):
            assert issubclass(cls, TileError)
        assert issubclass(CacheWriteError, OSError)
        assert issubclass(TileNotFoundError, FileNotFoundError)
        assert issubclass(SchemaConfigurationError, ValueError)

    def test_fetch_failed_with_status(self):
        err = FetchFailedError('https://x/1/0/0.png', 'HTTP 503', status=503)
        assert err.status == 503
        assert '503' in str(err)
        assert 'https://x/1/0/0.png' in str(err)

    def test_fetch_failed_with_cause(self):
        cause = ConnectionResetError('reset')
        err = FetchFailedError('https://x', cause)
        assert err.cause is cause
        assert 'reset' in str(err)

    def test_invalid_index(self):
        err = InvalidIndexError('3/9/9', 'col out of range')
        assert err.index == '3/9/9'
        assert err.reason == 'col out of range'

    def test_not_found(self):
        err = TileNotFoundError('3/1/1', '/tiles/3/1/1.png')
        assert str(err) == (
            'The tile 3/1/1 was not found at its expected location: /tiles/3/1/1.png'
        )
