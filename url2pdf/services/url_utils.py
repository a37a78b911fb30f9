"""
URL helpers.

Validation of target URLs and derivation of download filenames.

URLs are checked with the same rules a browser applies when it parses an
absolute URL (WHATWG URL Standard): surrounding whitespace is trimmed, tabs
and newlines are dropped, and hosts of the special schemes must be valid
domains, IPv4 or bracketed IPv6 addresses.
"""

import ipaddress
import re
from typing import Optional, Tuple
from urllib.parse import quote, unquote

# ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*$")
_LEADING_HTTP_SCHEME_RE = re.compile(r"^https?://")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
_UNSAFE_HEADER_CHARS_RE = re.compile(r'["\\\x00-\x1f\x7f]')

# C0 controls and space
_TRIM_CHARS = "".join(chr(c) for c in range(0x21))
_TAB_OR_NEWLINE = str.maketrans("", "", "\t\n\r")

SPECIAL_SCHEMES = {"http", "https", "ws", "wss", "ftp", "file"}
FORBIDDEN_HOST_CHARS = frozenset("\x00\t\n\r #/:<>?@[\\]^|")
FORBIDDEN_DOMAIN_CHARS = FORBIDDEN_HOST_CHARS | frozenset(chr(c) for c in range(0x20)) | {"%", "\x7f"}
MAX_FILENAME_LENGTH = 50

_IPV4_DIGITS = {10: "0123456789", 8: "01234567", 16: "0123456789abcdefABCDEF"}


def _ipv4_number(part: str) -> Optional[int]:
    base = 10
    if part[:2] in ("0x", "0X"):
        part, base = part[2:], 16
    elif len(part) > 1 and part[0] == "0":
        part, base = part[1:], 8
    if not part:
        return 0
    if not all(c in _IPV4_DIGITS[base] for c in part):
        return None
    return int(part, base)


def _ipv4_parts(domain: str) -> list:
    parts = domain.split(".")
    if len(parts) > 1 and parts[-1] == "":
        parts.pop()
    return parts


def _ends_in_number(domain: str) -> bool:
    last = _ipv4_parts(domain)[-1]
    if last and all(c in "0123456789" for c in last):
        return True
    return bool(last) and _ipv4_number(last) is not None


def _valid_ipv4(domain: str) -> bool:
    parts = _ipv4_parts(domain)
    if len(parts) > 4 or any(not part for part in parts):
        return False
    numbers = [_ipv4_number(part) for part in parts]
    if any(number is None for number in numbers):
        return False
    if any(number > 255 for number in numbers[:-1]):
        return False
    return numbers[-1] < 256 ** (5 - len(numbers))


def _valid_host(host: str, special: bool) -> bool:
    if host.startswith("["):
        if not host.endswith("]") or "%" in host:
            return False
        try:
            ipaddress.IPv6Address(host[1:-1])
        except ValueError:
            return False
        return True

    if not special:
        return not any(c in FORBIDDEN_HOST_CHARS for c in host)

    domain = unquote(host)
    if not domain.isascii():
        try:
            domain = domain.encode("idna").decode("ascii")
        except UnicodeError:
            return False
    domain = domain.lower()

    if not domain or any(c in FORBIDDEN_DOMAIN_CHARS for c in domain):
        return False
    if _ends_in_number(domain):
        return _valid_ipv4(domain)
    return True


def _split_at(rest: str, delimiters: str) -> Tuple[str, str]:
    end = len(rest)
    for delimiter in delimiters:
        index = rest.find(delimiter)
        if index != -1:
            end = min(end, index)
    return rest[:end], rest[end:]


def _valid_authority(authority: str, special: bool) -> bool:
    host_port = authority.rpartition("@")[2]
    if host_port.startswith("["):
        close = host_port.find("]")
        if close == -1:
            return False
        host, after = host_port[:close + 1], host_port[close + 1:]
        if after and not after.startswith(":"):
            return False
        port = after[1:]
    else:
        host, _, port = host_port.partition(":")

    if port and not (all(c in "0123456789" for c in port) and int(port) <= 65535):
        return False
    if special and not host:
        return False
    return _valid_host(host, special)


def normalize_url(value) -> Optional[str]:
    """
    Parse a candidate absolute URL the way a browser would.

    Args:
        value: Candidate URL

    Returns:
        The URL as it should be handed to the browser, or None if it does
        not parse. Never raises.
    """
    if not isinstance(value, str):
        return None

    url = value.strip(_TRIM_CHARS).translate(_TAB_OR_NEWLINE)
    scheme, colon, rest = url.partition(":")
    if not colon or not _SCHEME_RE.match(scheme):
        return None
    scheme = scheme.lower()

    if scheme not in SPECIAL_SCHEMES:
        if rest.startswith("//"):
            authority, _ = _split_at(rest[2:], "/?#")
            if not _valid_authority(authority, special=False):
                return None
        return url

    if scheme == "file":
        if rest[:2] in ("//", "\\\\", "/\\", "\\/"):
            authority, _ = _split_at(rest[2:], "/\\?#")
            # file://C:/path carries a drive letter, not a host
            if authority and not re.match(r"^[a-zA-Z][:|]$", authority):
                if not _valid_host(authority, special=True) and authority.lower() != "localhost":
                    return None
        return url

    # http:example.com and http:\\example.com parse like http://example.com
    authority, tail = _split_at(rest.lstrip("/\\"), "/\\?#")
    if not _valid_authority(authority, special=True):
        return None
    path, query = _split_at(tail, "?#")
    tail = path.replace("\\", "/") + query
    return f"{scheme}://{authority}{tail.replace(' ', '%20')}"


def is_valid_url(value) -> bool:
    """
    Check whether a value is a syntactically valid absolute URL.

    No network access is made. Never raises.

    Args:
        value: Candidate URL

    Returns:
        True if the value parses as an absolute URL
    """
    return normalize_url(value) is not None


def sanitize_filename(url: str) -> str:
    """
    Derive a filesystem-safe base name from a URL.

    "https://Example.com/Path?q=1" -> "example_com_path_q_1"
    """
    name = _LEADING_HTTP_SCHEME_RE.sub("", url, count=1)
    name = _NON_ALNUM_RE.sub("_", name)
    return name.lower()[:MAX_FILENAME_LENGTH]


def resolve_filename(url: str, filename: Optional[str] = None) -> str:
    """Caller's filename when given, otherwise one derived from the URL."""
    if filename:
        return filename
    return f"{sanitize_filename(url)}.pdf"


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header value.

    Quotes, backslashes and control characters are dropped from the quoted
    name. Non-ASCII names get an ASCII fallback plus an RFC 5987
    ``filename*`` parameter.
    """
    safe_name = _UNSAFE_HEADER_CHARS_RE.sub("", filename)
    try:
        safe_name.encode("ascii")
    except UnicodeEncodeError:
        fallback = safe_name.encode("ascii", "replace").decode("ascii").replace("?", "_")
        encoded = quote(safe_name, safe="")
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"
    return f'attachment; filename="{safe_name}"'
