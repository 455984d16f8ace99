"""Formatting - Turkish (tr-TR) money and date rendering for report emails.

Invariants:
    - Currency: "₺" prefix, "." thousands separator, "," decimal separator, 2 decimals
    - Negative amounts carry the sign before the symbol ("-₺1.234,50")
    - Month and weekday names are Turkish, independent of the process locale
"""

from datetime import date

MONTHS_TR = (
    "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
    "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık",
)
WEEKDAYS_TR = (
    "Pazartesi", "Salı", "Çarşamba", "Perşembe", "Cuma", "Cumartesi", "Pazar",
)


def format_number(value: float, decimals: int = 2) -> str:
    """1234.5 -> "1.234,50". Amounts that round to zero carry no sign."""
    rounded = round(value, decimals)
    text = f"{abs(rounded):,.{decimals}f}"
    text = text.replace(",", " ").replace(".", ",").replace(" ", ".")
    return f"-{text}" if rounded < 0 else text


def format_currency(amount: float) -> str:
    text = format_number(amount)
    if text.startswith("-"):
        return f"-₺{text[1:]}"
    return f"₺{text}"


def format_short_date(day: date) -> str:
    """15.01.2024"""
    return f"{day.day:02d}.{day.month:02d}.{day.year}"


def format_long_date(day: date) -> str:
    """15 Ocak 2024 Pazartesi"""
    return f"{day.day} {MONTHS_TR[day.month - 1]} {day.year} {WEEKDAYS_TR[day.weekday()]}"


def format_month_year(day: date) -> str:
    """Ocak 2024"""
    return f"{MONTHS_TR[day.month - 1]} {day.year}"


def format_percent(value: float) -> str:
    """Signed, one decimal: +12,5%"""
    sign = "+" if value >= 0 else "-"
    return f"{sign}{format_number(abs(value), 1)}%"
