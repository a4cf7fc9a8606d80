"""
Command line entry point: python -m quickdrop / quickdrop
"""

import argparse
import logging
import os
import ssl
from pathlib import Path

from quickdrop.config import (
    DEFAULT_HOST,
    DEFAULT_MAX_SIZE_MB,
    DEFAULT_PORT,
    DEFAULT_SSL_CERT,
    DEFAULT_SSL_KEY,
    DEFAULT_STORAGE_DIR,
    DEFAULT_SWEEP_SECONDS,
    DEFAULT_TTL_MINUTES,
    Config,
)
from quickdrop.netutil import open_browser
from quickdrop.server import QuickDropServer, create_http_server

logger = logging.getLogger(__name__)


def setup_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def build_parser():
    parser = argparse.ArgumentParser(description='QuickDrop - single-use file relay over the local network')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT, help=f'Server port (default: {DEFAULT_PORT})')
    parser.add_argument('--host', type=str, default=DEFAULT_HOST, help=f'Host interface (default: {DEFAULT_HOST})')
    parser.add_argument('--storage-dir', type=str, default=DEFAULT_STORAGE_DIR,
                        help=f'Directory for pending uploads (default: {DEFAULT_STORAGE_DIR})')
    parser.add_argument('--ttl-minutes', type=float, default=DEFAULT_TTL_MINUTES,
                        help=f'Minutes before an unclaimed upload expires (default: {DEFAULT_TTL_MINUTES})')
    parser.add_argument('--sweep-seconds', type=float, default=DEFAULT_SWEEP_SECONDS,
                        help=f'Seconds between expiry sweeps (default: {DEFAULT_SWEEP_SECONDS})')
    parser.add_argument('--max-size', type=int, default=DEFAULT_MAX_SIZE_MB,
                        help=f'Max file size in MB (default: {DEFAULT_MAX_SIZE_MB})')
    parser.add_argument('--public-host', type=str, default=None,
                        help='Host name or address used in share links (default: detected LAN address)')
    parser.add_argument('--no-browser', action='store_true', help='Do not open the browser on startup')
    parser.add_argument('--ssl-cert', type=str, default=DEFAULT_SSL_CERT,
                        help='Path to SSL certificate file (enables HTTPS)')
    parser.add_argument('--ssl-key', type=str, default=DEFAULT_SSL_KEY,
                        help='Path to SSL private key file (required if --ssl-cert is set)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def wrap_ssl(httpd, cert, key):
    """Serve HTTPS on an already bound server"""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(cert, key)
    httpd.socket = context.wrap_socket(httpd.socket, server_side=True)


def main(argv=None):
    """Main function"""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    config = Config.from_args(args)

    if bool(config.ssl_cert) != bool(config.ssl_key):
        logger.error('--ssl-cert and --ssl-key must be given together')
        return 2
    for path in (config.ssl_cert, config.ssl_key):
        if path and not os.path.exists(path):
            logger.error(f'SSL file not found: {path}')
            return 2

    server_instance = QuickDropServer(config)
    try:
        httpd = create_http_server(server_instance, config.host, config.port)
    except OSError as e:
        logger.error(f'Could not bind {config.host}:{config.port}: {e}')
        return 1

    if config.use_https:
        try:
            wrap_ssl(httpd, config.ssl_cert, config.ssl_key)
        except OSError as e:
            logger.exception(f'Error setting up SSL: {e}')
            httpd.server_close()
            return 1

    url = server_instance.base_url

    print('=' * 60)
    print('QuickDrop')
    print('=' * 60)
    print(f'Storage directory: {Path(config.storage_dir).absolute()}')
    print(f'Unclaimed files expire after: {config.ttl_seconds / 60:g} minutes')
    print(f'Max file size: {args.max_size} MB')
    print('=' * 60)
    print(f'QuickDrop is running at: {url}')
    print('OPEN THIS URL IN YOUR BROWSER')
    print('=' * 60)
    print('Press Ctrl+C to stop the server')

    server_instance.start()
    if config.open_browser:
        open_browser(url)

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        print('\nShutting down server...')
    finally:
        httpd.server_close()
        server_instance.close()
    return 0
