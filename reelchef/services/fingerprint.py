"""URL fingerprinting for the recipe cache."""

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619


def normalize_url(url: str) -> str:
    """Lower-case the URL and strip trailing slashes."""
    return url.lower().rstrip("/")


def fingerprint(url: str) -> str:
    """32-bit FNV-1a hash of the normalized URL, rendered as hex.

    Not security-sensitive; collisions are tolerated at this volume.
    """
    h = FNV_OFFSET_BASIS
    for ch in normalize_url(url):
        # UTF-16 code units, to stay compatible with url_hash values already stored
        for unit in _utf16_units(ch):
            h ^= unit
            h = (h * FNV_PRIME) & 0xFFFFFFFF
    return format(h, "x")


def _utf16_units(ch: str) -> tuple[int, ...]:
    cp = ord(ch)
    if cp < 0x10000:
        return (cp,)
    cp -= 0x10000
    return (0xD800 + (cp >> 10), 0xDC00 + (cp & 0x3FF))
