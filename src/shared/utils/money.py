from typing import Union

# Prices and revenues are whole coins
Coins = int


def average_per(total: Union[int, float], count: int) -> Coins:
    """
    Whole-coin average of total over count, floored; 0 when count is 0.

    Examples:
        >>> average_per(1000, 3)
        333
        >>> average_per(500, 0)
        0
    """
    if count <= 0:
        return 0
    return int(total // count)


def percent_change(current: Union[int, float], previous: Union[int, float]) -> float:
    """
    Growth of current over previous in percent.

    No baseline: 100 when current is positive, else 0.
    """
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def format_growth(value: float | None) -> str:
    """One-decimal percent label, e.g. '12.5%'; '-' when not available."""
    if value is None:
        return "-"
    return f"{value:.1f}%"
