"""Helpers for object keys and sizes."""


def human_readable_size(size: int) -> str:
    """Convert a size in bytes to human-readable format.

    Converts byte size to appropriate unit (B, KB, MB, GB, TB, PB) with
    two decimal places.

    Args:
        size: Size in bytes

    Returns:
        Formatted size string with unit (e.g., "2.50 MB")

    Example:
        >>> human_readable_size(2048)
        '2.00 KB'
        >>> human_readable_size(5242880)
        '5.00 MB'
    """
    unit_list = ["B", "KB", "MB", "GB", "TB", "PB"]
    index = 0

    f_size = float(size)
    while f_size >= 1024.0 and index < len(unit_list) - 1:
        f_size /= 1024.0
        index += 1

    return f"{f_size:.2f} {unit_list[index]}"
