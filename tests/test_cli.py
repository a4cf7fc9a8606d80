"""
Tests for argument parsing and configuration
"""
from pathlib import Path

from quickdrop import cli
from quickdrop.config import DEFAULT_PORT, Config


def test_defaults():
    args = cli.build_parser().parse_args([])
    config = Config.from_args(args)

    assert config.port == DEFAULT_PORT == 8989
    assert config.host == '0.0.0.0'
    assert config.ttl_seconds == 3600
    assert config.sweep_seconds == 60
    assert config.max_size_bytes == 1024 * 1024 * 1024
    assert config.storage_dir == Path('./uploads')
    assert config.open_browser is True
    assert config.scheme == 'http'


def test_overrides():
    args = cli.build_parser().parse_args([
        '--port', '9000', '--ttl-minutes', '5', '--sweep-seconds', '10',
        '--max-size', '2', '--public-host', 'drop.lan', '--no-browser',
        '--ssl-cert', 'c.pem', '--ssl-key', 'k.pem',
    ])
    config = Config.from_args(args)

    assert config.port == 9000
    assert config.ttl_seconds == 300
    assert config.sweep_seconds == 10
    assert config.max_size_bytes == 2 * 1024 * 1024
    assert config.public_host == 'drop.lan'
    assert config.open_browser is False
    assert config.scheme == 'https'


def test_ssl_options_must_come_together():
    assert cli.main(['--ssl-cert', 'cert.pem', '--no-browser']) == 2


def test_missing_ssl_file(tmp_path):
    key = tmp_path / 'key.pem'
    key.write_text('key')
    assert cli.main(['--ssl-cert', str(tmp_path / 'missing.pem'), '--ssl-key', str(key), '--no-browser']) == 2
