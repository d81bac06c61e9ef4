"""Network helpers used when the service starts.

``local_urls`` tells the operator where the API can be reached: always the
loopback URL, plus the LAN address when the host has one.
"""
import socket
from typing import List


def get_local_ip() -> str:
    """Return a non-loopback local IP address if possible, otherwise '127.0.0.1'.

    Connecting a UDP socket sends nothing; it only makes the OS pick the
    interface it would route through.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(("10.255.255.255", 1))
        ip = str(s.getsockname()[0])
    except OSError:
        ip = "127.0.0.1"
    finally:
        s.close()
    return ip


def local_urls(port: int) -> List[str]:
    urls = [f"http://localhost:{port}"]
    ip = get_local_ip()
    if ip not in ("127.0.0.1", "localhost"):
        urls.append(f"http://{ip}:{port}")
    return urls
