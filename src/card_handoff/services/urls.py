"""Resolution of the public base URL used in hand-off links."""

import logging
import socket
from urllib.parse import quote, urlsplit

_logger = logging.getLogger(__name__)

_LOCAL_HOST_PREFIXES = ("localhost", "127.0.0.1", "[::1]")


def parse_base_url(raw: str | None) -> str:
    """Validate a configured base URL and strip its trailing slash."""
    if not raw:
        return ""
    parts = urlsplit(raw.strip())
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        _logger.warning("Ignoring invalid PUBLIC_BASE_URL: %s", raw)
        return ""
    return raw.strip().rstrip("/")


def local_ipv4() -> str | None:
    """Return this machine's LAN IPv4 address, if one can be found."""
    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packets are sent; connecting only selects an outbound interface.
        probe.connect(("10.255.255.255", 1))
        address = probe.getsockname()[0]
    except OSError:
        return None
    finally:
        probe.close()
    if address.startswith("127."):
        return None
    return address


def resolve_public_base_url(  # noqa: PLR0913
    *,
    configured: str | None,
    production: bool,
    host: str,
    scheme: str,
    forwarded_proto: str | None,
    port: int,
) -> str:
    """Pick the base URL a phone can reach, or '' when none is safe to use."""
    if configured:
        return parse_base_url(configured)
    if production:
        return ""
    host = host.lower()
    if host.startswith(_LOCAL_HOST_PREFIXES):
        address = local_ipv4()
        if address:
            return f"http://{address}:{port}"
    protocol = (forwarded_proto or "").split(",")[0].strip() or scheme
    return f"{protocol}://{host}"


def desktop_url(base_url: str, session_id: str) -> str:
    """URL the desktop polls from after handing off."""
    return f"{base_url}/?sessionId={quote(session_id, safe='')}&autopoll=1"


def mobile_url(base_url: str, session_id: str, return_to: str) -> str:
    """URL encoded in the QR code for the phone."""
    return (
        f"{base_url}/scanner.html?sessionId={quote(session_id, safe='')}"
        f"&returnTo={quote(return_to, safe='')}"
    )
