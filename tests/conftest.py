"""
QuickDrop - test configuration and fixtures
"""
import threading

import httpx
import pytest

from quickdrop.blob_store import BlobStore
from quickdrop.config import Config
from quickdrop.lifecycle import Lifecycle
from quickdrop.registry import Registry
from quickdrop.server import QuickDropServer, create_http_server

TTL = 3600
SWEEP = 60


class FakeClock:
    """Manually advanced clock for expiry tests"""

    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage_dir(tmp_path):
    return tmp_path / 'uploads'


@pytest.fixture
def blobs(storage_dir):
    return BlobStore(storage_dir)


@pytest.fixture
def registry(clock):
    return Registry(clock=clock)


@pytest.fixture
def lifecycle(registry, blobs):
    return Lifecycle(registry, blobs, ttl_seconds=TTL, max_size_bytes=1024 * 1024)


@pytest.fixture
def app(storage_dir, clock):
    """QuickDropServer served by a live threading HTTP server on a free port"""
    config = Config(
        host='127.0.0.1',
        port=0,
        storage_dir=storage_dir,
        ttl_seconds=TTL,
        sweep_seconds=SWEEP,
        max_size_bytes=16 * 1024 * 1024,
        public_host='127.0.0.1',
        open_browser=False,
    )
    server_instance = QuickDropServer(config, clock=clock)
    httpd = create_http_server(server_instance, config.host, config.port)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()

    yield server_instance

    httpd.shutdown()
    httpd.server_close()
    thread.join(5)
    server_instance.close()


@pytest.fixture
def client(app):
    with httpx.Client(base_url=app.base_url, timeout=10) as c:
        yield c


def stored_files(directory):
    """Files currently present in the storage directory"""
    if not directory.exists():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file())
