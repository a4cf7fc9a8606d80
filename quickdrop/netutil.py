"""
Network and desktop helpers used at startup.
"""

import logging
import socket
import webbrowser

logger = logging.getLogger(__name__)


def get_local_ip():
    """Get local network IP address without external connections"""
    ip_list = []
    try:
        hostname = socket.gethostname()
        ip_list = socket.gethostbyname_ex(hostname)[2]
    except OSError:
        pass

    # Filter out localhost and link-local addresses
    for ip in ip_list:
        if not ip.startswith('127.') and not ip.startswith('169.254.'):
            return ip

    # Hostname maps to loopback only (Debian-style 127.0.1.1): ask the routing
    # table which interface would carry outbound traffic. UDP connect sends nothing.
    outbound = _outbound_ip()
    if outbound:
        return outbound

    return ip_list[0] if ip_list else '127.0.0.1'


def _outbound_ip():
    """Address of the interface holding the default route, or None"""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(('10.255.255.255', 1))
            ip = s.getsockname()[0]
    except OSError:
        return None
    if ip.startswith('127.') or ip == '0.0.0.0':
        return None
    return ip


def open_browser(url):
    """Open url in the default browser; failures are only logged"""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        logger.warning(f'Error opening browser: {e}')
        return False
    if not opened:
        logger.warning(f'No browser available, open {url} manually')
    return opened
