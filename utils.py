import ipaddress
import posixpath
import re

# UUID (standard 36-char, any version, lowercase hex)
UUID_REGEX = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
)

# MD5 / SHA1 / SHA256 hex digests, lowercase only; uppercase falls through to hex numbers
HASH_REGEX = re.compile(r"[0-9a-f]{32}|[0-9a-f]{40}|[0-9a-f]{64}")

# Pure numeric
NUMERIC_REGEX = re.compile(r"[0-9]+")

# Pure hexadecimal
HEXADECIMAL_REGEX = re.compile(r"[0-9a-f]+", re.IGNORECASE)

# Static assets, only meaningful on the terminal segment
IMAGE_EXTENSION_REGEX = re.compile(r".*\.(?:png|jpg|jpeg|svg|tif|tiff|gif|ico)", re.IGNORECASE | re.DOTALL)
FONT_EXTENSION_REGEX = re.compile(r".*\.(?:ttf|woff)", re.IGNORECASE | re.DOTALL)


def is_hash(segment: str) -> bool:
    return HASH_REGEX.fullmatch(segment) is not None


def is_number(segment: str) -> bool:
    return (
        NUMERIC_REGEX.fullmatch(segment) is not None
        or HEXADECIMAL_REGEX.fullmatch(segment) is not None
    )


def is_uuid(segment: str) -> bool:
    return UUID_REGEX.fullmatch(segment) is not None


def is_ip(segment: str) -> bool:
    # plain literals only, scoped IPv6 (fe80::1%eth0) is not an address
    if "%" in segment:
        return False
    try:
        ipaddress.ip_address(segment)
    except ValueError:
        return False
    return True


def is_image(segment: str) -> bool:
    return IMAGE_EXTENSION_REGEX.fullmatch(segment) is not None


def is_font(segment: str) -> bool:
    return FONT_EXTENSION_REGEX.fullmatch(segment) is not None


def clean_path(path: str) -> str:
    """
    Lexically clean a URL path.

    Resolves `.` and `..`, collapses repeated separators and drops
    the trailing separator. Unlike posixpath.normpath, a leading `//`
    is collapsed too, and an empty result is `.`.
    """
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned
