"""Human-readable byte sizes."""

_UNITS = (
    ("GB", 1024 ** 3),
    ("MB", 1024 ** 2),
    ("KB", 1024),
)


def prettify_bytes(size: int) -> str:
    """Format a byte count with the largest unit it strictly exceeds."""
    for unit, scale in _UNITS:
        if size > scale:
            return f"{size / scale:.2f} {unit}"
    return f"{size} B"