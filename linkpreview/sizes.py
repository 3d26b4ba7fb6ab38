from linkpreview.errors import FormatError

UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB", "YiB")


def format_size(size: int) -> str:
    """Render a byte count with binary units, e.g. ``9.31 GiB``."""
    if size < 0:
        raise FormatError(f"negative size: {size}")
    if size < 1024:
        return f"{size} B"

    value = size
    unit = 0
    while value >= 1024 and unit < len(UNITS) - 1:
        value /= 1024
        unit += 1
    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {UNITS[unit]}"
