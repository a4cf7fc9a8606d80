"""
HTTP front end for QuickDrop.

QuickDropServer wires the blob store, registry, lifecycle controller and
reaper together; QuickDropRequestHandler maps the four relay routes and the
browser page onto it.
"""

import json
import logging
import os
import time
from email.message import Message
from email.utils import collapse_rfc2231_value
from io import BytesIO
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import quote, unquote

from quickdrop.blob_store import BlobStore
from quickdrop.config import CHUNK_SIZE, QR_SIZE
from quickdrop.errors import NotFound, StorageError, UploadError
from quickdrop.lifecycle import Lifecycle, Status
from quickdrop.netutil import get_local_ip
from quickdrop.qr import render_qr
from quickdrop.reaper import Reaper
from quickdrop.registry import Registry
from quickdrop.ui import get_html_interface

logger = logging.getLogger(__name__)

# Headroom for multipart boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024


class QuickDropServer:
    """Main server class managing storage, lifecycle and cleanup"""

    def __init__(self, config, clock=time.time):
        self.config = config
        self.port = config.port
        self.public_host = config.public_host or get_local_ip()

        self.blobs = BlobStore(config.storage_dir)
        self.registry = Registry(clock=clock)
        self.lifecycle = Lifecycle(self.registry, self.blobs, config.ttl_seconds,
                                   max_size_bytes=config.max_size_bytes)
        self.reaper = Reaper(self.lifecycle, config.sweep_seconds)

    @property
    def base_url(self):
        return f'{self.config.scheme}://{self.public_host}:{self.port}'

    def download_url(self, token):
        return f'{self.base_url}/download/{token}'

    def qr_url(self, token):
        return f'/qr/{token}'

    def start(self):
        """Start background expiry"""
        self.reaper.start()

    def close(self):
        """Stop the reaper and destroy whatever is still pending"""
        self.reaper.stop()
        self.lifecycle.destroy_all()


class QuickDropRequestHandler(BaseHTTPRequestHandler):
    """HTTP Request Handler for the file relay"""

    server_instance = None

    def do_GET(self):
        """Handle GET requests"""
        path = self.path.split('?')[0]

        if path == '/' or path == '/index.html':
            self._send_response(200, get_html_interface(), content_type='text/html; charset=utf-8')
        elif path.startswith('/download/'):
            self._serve_download(self._token_from(path, '/download/'))
        elif path.startswith('/status/'):
            self._serve_status(self._token_from(path, '/status/'))
        elif path.startswith('/qr/'):
            self._serve_qr(self._token_from(path, '/qr/'))
        else:
            self._send_response(404, {'error': 'Not found'})

    def do_POST(self):
        """Handle POST requests"""
        path = self.path.split('?')[0]

        if path == '/upload':
            self._handle_upload()
        else:
            self._send_response(404, {'error': 'Not found'})

    @staticmethod
    def _token_from(path, prefix):
        return unquote(path[len(prefix):])

    def _handle_upload(self):
        """Handle file upload"""
        content_type = self.headers.get('Content-Type', '')
        if not content_type.startswith('multipart/form-data') or 'boundary=' not in content_type:
            self._send_response(400, {'error': 'Invalid content type'})
            return

        try:
            content_length = int(self.headers.get('Content-Length', 0))
        except ValueError:
            content_length = -1
        if content_length < 0:
            self._send_response(400, {'error': 'Invalid Content-Length'})
            self.close_connection = True
            return

        max_size = self.server_instance.config.max_size_bytes
        if content_length > max_size + MULTIPART_OVERHEAD:
            self._send_response(400, {'error': f'File size exceeds {max_size / (1024 * 1024):.0f} MB limit'})
            # The body is never read, so the connection cannot be reused
            self.close_connection = True
            return

        boundary = content_type.split('boundary=')[1].split(';')[0].strip().strip('"')
        parts = parse_multipart(self.rfile.read(content_length), boundary.encode())
        if 'file' not in parts:
            self._send_response(400, {'error': 'No file uploaded'})
            return

        filename, content = parts['file']
        lifecycle = self.server_instance.lifecycle
        try:
            entry = lifecycle.upload(BytesIO(content), filename=filename)
        except UploadError as e:
            if isinstance(e.__cause__, StorageError):
                logger.error(f'[UPLOAD] Error saving file: {e}')
                self._send_response(500, {'error': f'Failed to save file: {e}'})
            else:
                self._send_response(400, {'error': str(e)})
            return

        self._send_response(200, {
            'token': entry.token,
            'url': self.server_instance.download_url(entry.token),
            'qr_url': self.server_instance.qr_url(entry.token),
        })

    def _serve_download(self, token):
        """Stream the file once, then destroy it"""
        lifecycle = self.server_instance.lifecycle
        try:
            with lifecycle.download(token) as (entry, stream):
                size = os.fstat(stream.fileno()).st_size
                self.send_response(200)
                self.send_header('Content-Description', 'File Transfer')
                self.send_header('Content-Transfer-Encoding', 'binary')
                self.send_header('Content-Disposition', content_disposition(entry.filename or entry.location.name))
                self.send_header('Content-Type', 'application/octet-stream')
                self.send_header('Content-Length', str(size))
                self.end_headers()
                sent = self._copy_stream(stream)
            logger.info(f'[DOWNLOAD] Delivered {sent} bytes for token {token}')
        except NotFound:
            self._send_response(404, 'File not found or already destroyed.', content_type='text/plain; charset=utf-8')
        except StorageError as e:
            logger.error(f'[DOWNLOAD] {e}')
            self._send_response(500, 'Failed to read file.', content_type='text/plain; charset=utf-8')
        except OSError as e:
            # Client went away mid-stream; the token is consumed regardless
            logger.warning(f'[DOWNLOAD] Error streaming file for token {token}: {e}')
            self.close_connection = True

    def _copy_stream(self, stream):
        total = 0
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            self.wfile.write(chunk)
            total += len(chunk)
        self.wfile.flush()
        return total

    def _serve_status(self, token):
        status = self.server_instance.lifecycle.status(token)
        self.send_response(200 if status is Status.EXISTS else 404)
        self.send_header('Content-Length', '0')
        self.end_headers()

    def _serve_qr(self, token):
        if self.server_instance.lifecycle.status(token) is Status.NOT_FOUND:
            self._send_response(404, {'error': 'Not found'})
            return
        try:
            png = render_qr(self.server_instance.download_url(token), QR_SIZE)
        except Exception:
            logger.exception(f'[QR] Failed to encode QR code for token {token}')
            self._send_response(500, {'error': 'Failed to generate QR code'})
            return
        self._send_response(200, png, content_type='image/png')

    def _send_response(self, status_code, data, content_type='application/json'):
        """Send HTTP response"""
        self.send_response(status_code)
        self.send_header('Content-Type', content_type)
        self.send_header('Cache-Control', 'no-store')

        if isinstance(data, (dict, list)):
            response = json.dumps(data).encode('utf-8')
        else:
            response = data.encode('utf-8') if isinstance(data, str) else data

        self.send_header('Content-Length', str(len(response)))
        self.end_headers()
        self.wfile.write(response)

    def log_message(self, format, *args):
        """Route request logs through the logging module"""
        logger.info(f'{self.address_string()} - {format % args}')


def content_disposition(filename):
    """attachment header with an ASCII fallback and an RFC 5987 UTF-8 name"""
    fallback = filename.encode('ascii', 'ignore').decode('ascii').replace('"', '').replace('\\', '')
    if not fallback.strip():
        fallback = 'download'
    header = f'attachment; filename="{fallback}"'
    if fallback != filename:
        header += f"; filename*=UTF-8''{quote(filename)}"
    return header


def parse_multipart(body, boundary):
    """Split a multipart/form-data body into {field name: (filename, bytes)}"""
    fields = {}
    for part in body.split(b'--' + boundary):
        if not part.strip() or part.strip() == b'--':
            continue

        # Find headers section
        header_end = part.find(b'\r\n\r\n')
        if header_end == -1:
            continue
        headers_section = part[:header_end]
        content = part[header_end + 4:]

        # Remove the CRLF that precedes the next boundary marker
        if content.endswith(b'\r\n'):
            content = content[:-2]

        name, filename = None, None
        for line in headers_section.split(b'\r\n'):
            key, _, value = line.decode('utf-8', errors='replace').partition(':')
            if key.strip().lower() != 'content-disposition':
                continue
            # Message handles quoted-string parameters (a ; or % inside the filename)
            msg = Message()
            msg['content-disposition'] = value.strip()
            name = msg.get_param('name', header='content-disposition')
            filename = msg.get_filename()
            if isinstance(name, tuple):
                name = collapse_rfc2231_value(name)
        if name is not None and name not in fields:
            fields[name] = (filename or '', content)
    return fields


def create_http_server(server_instance, host, port):
    """Bind a threading HTTP server for server_instance"""
    handler = type('BoundRequestHandler', (QuickDropRequestHandler,),
                   {'server_instance': server_instance})
    httpd = ThreadingHTTPServer((host, port), handler)
    # Port 0 asks the OS for a free port; links must carry the real one
    server_instance.port = httpd.server_address[1]
    return httpd
