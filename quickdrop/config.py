"""
Runtime configuration for QuickDrop.
"""

from dataclasses import dataclass
from pathlib import Path

# Configuration defaults
DEFAULT_PORT = 8989
DEFAULT_HOST = '0.0.0.0'
DEFAULT_STORAGE_DIR = './uploads'
DEFAULT_TTL_MINUTES = 60
DEFAULT_SWEEP_SECONDS = 60
DEFAULT_MAX_SIZE_MB = 1024
DEFAULT_SSL_CERT = None
DEFAULT_SSL_KEY = None

CHUNK_SIZE = 8192  # 8KB chunks
QR_SIZE = 256


@dataclass
class Config:
    """Settings shared by the server, the lifecycle controller and the reaper"""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    storage_dir: Path = Path(DEFAULT_STORAGE_DIR)
    ttl_seconds: float = DEFAULT_TTL_MINUTES * 60
    sweep_seconds: float = DEFAULT_SWEEP_SECONDS
    max_size_bytes: int = DEFAULT_MAX_SIZE_MB * 1024 * 1024
    public_host: str = None
    ssl_cert: str = DEFAULT_SSL_CERT
    ssl_key: str = DEFAULT_SSL_KEY
    open_browser: bool = True

    @property
    def use_https(self):
        return bool(self.ssl_cert and self.ssl_key)

    @property
    def scheme(self):
        return 'https' if self.use_https else 'http'

    @classmethod
    def from_args(cls, args):
        """Build a Config from parsed command line arguments"""
        return cls(
            host=args.host,
            port=args.port,
            storage_dir=Path(args.storage_dir),
            ttl_seconds=args.ttl_minutes * 60,
            sweep_seconds=args.sweep_seconds,
            max_size_bytes=args.max_size * 1024 * 1024,
            public_host=args.public_host,
            ssl_cert=args.ssl_cert,
            ssl_key=args.ssl_key,
            open_browser=not args.no_browser,
        )
