"""Tests for logging helpers."""

import logging
from unittest.mock import patch

from shared.log import mask_secret, setup_logging


class TestMaskSecret:
    """Tests for mask_secret."""

    def test_masks_tail(self):
        assert mask_secret('abcdefgh', 4) == 'abcd****'

    def test_short_secret_fully_masked(self):
        assert mask_secret('abc', 4) == '***'

    def test_empty(self):
        assert mask_secret(None, 4) == ''
        assert mask_secret('', 4) == ''


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_configures_root(self):
        with patch('logging.basicConfig') as basic_config:
            setup_logging(logging.DEBUG)
        kwargs = basic_config.call_args.kwargs
        assert kwargs['level'] == logging.DEBUG
        assert len(kwargs['handlers']) == 1

    def test_log_file(self, tmp_path):
        log_file = tmp_path / 'logs' / 'tiles.log'
        with patch('logging.basicConfig') as basic_config:
            setup_logging(log_file=log_file)
        handlers = basic_config.call_args.kwargs['handlers']
        assert any(isinstance(h, logging.FileHandler) for h in handlers)
        assert log_file.parent.is_dir()
        for h in handlers:
            h.close()

    def test_aiohttp_quieted(self):
        with patch('logging.basicConfig'):
            setup_logging(logging.DEBUG)
        assert logging.getLogger('aiohttp').level == logging.WARNING
