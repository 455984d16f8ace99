"""Report Rendering - Jinja2 HTML bodies and subjects for report emails.

Invariants:
    - Autoescaping is on: transaction descriptions and category names are user input
    - Every amount goes through the tr-TR currency filter, every date through a Turkish filter
    - One render per frequency run; the same HTML goes to every recipient
"""


from jinja2 import Environment, PackageLoader, select_autoescape

from alphacore.core.domain_types import ReportFrequency
from alphacore.core.formatting import (
    format_currency, format_long_date, format_month_year,
    format_percent, format_short_date,
)

_env = Environment(
    loader=PackageLoader("alphacore", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["currency"] = format_currency
_env.filters["long_date"] = format_long_date
_env.filters["short_date"] = format_short_date
_env.filters["month_year"] = format_month_year
_env.filters["percent"] = format_percent

_TEMPLATES = {
    ReportFrequency.DAILY: "emails/daily_report.html",
    ReportFrequency.WEEKLY: "emails/weekly_report.html",
    ReportFrequency.MONTHLY: "emails/monthly_report.html",
}


def report_subject(frequency: ReportFrequency, report: dict) -> str:
    if frequency == ReportFrequency.DAILY:
        return f"Günlük Rapor - {format_short_date(report['day'])}"
    if frequency == ReportFrequency.WEEKLY:
        return (
            f"Haftalık Rapor - {format_short_date(report['start_day'])}"
            f" - {format_short_date(report['last_day'])}"
        )
    return f"Aylık Rapor - {format_month_year(report['start_day'])}"


def render_report(frequency: ReportFrequency, report: dict) -> str:
    template = _env.get_template(_TEMPLATES[frequency])
    return template.render(report=report)
