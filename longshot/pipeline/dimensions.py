import math

MAX_DIMENSION = 32767


def sanitize_dimension(value, default: int = 800, ceiling: int = MAX_DIMENSION) -> int:
    """
    Coerce a requested surface dimension into the range [1, ceiling].

    Missing, non-numeric, non-finite and non-positive values fall back to
    ``default``; fractional values are floored; oversized values are clamped.
    Never raises.
    """
    if value is None or isinstance(value, bool):
        return default

    try:
        number = float(value)
    except (TypeError, ValueError):
        return default

    if not math.isfinite(number):
        return default

    result = math.floor(number)
    if result < 1:
        return default

    return min(result, ceiling)
