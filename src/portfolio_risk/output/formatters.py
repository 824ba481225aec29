def fmt_pct(value: float | None, decimals: int = 2) -> str:
    if value is None:
        return "N/A"
    return f"{value:+.{decimals}f}%"


def fmt_fraction_pct(value: float | None, decimals: int = 2) -> str:
    """Format a fraction (0.0667) as a signed percentage (+6.67%)."""
    if value is None:
        return "N/A"
    return fmt_pct(value * 100, decimals)


def fmt_number(value: float | None, decimals: int = 2) -> str:
    if value is None:
        return "N/A"
    return f"{value:,.{decimals}f}"


def fmt_price(value: float | None) -> str:
    if value is None:
        return "N/A"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def risk_level_color(level: str) -> str:
    colors = {
        "LOW": "green",
        "MEDIUM": "yellow",
        "HIGH": "bold red",
    }
    return colors.get(level, "white")
