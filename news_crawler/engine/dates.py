"""Publication date recognition for scraped pages.

Dates arrive as free text pulled from ``<meta>``, ``<time>`` or ``.date``
nodes, in English or Spanish, absolute or relative. ``DateRecognizer`` runs a
fixed, ordered chain of rules; the first rule that yields a timestamp wins:

1. pure digits as Unix epoch seconds
2. ISO-8601
3. ``YYYY-MM-DD<TZ>HH:MM:SS`` with a timezone abbreviation
4. ``dd/MM/yyyy HH:mm``
5. ``dd-MM-yyyy HH:mm:ss``
6. a trailing ``", <Month> dd, yyyy"`` after a byline
7. relative phrases (``"2 hours ago"``, ``"hace 3 días"``)
8. absolute formats with Spanish or English month names
9. loose Spanish forms (``"15 de mar. de 2024"``, ``"15 de marzo del 2024"``)

Text matching no rule is treated as not recent; recognition never raises.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional

import structlog
from dateutil.relativedelta import relativedelta

from ..analysis.text import collapse_whitespace, strip_accents
from ..models import utc_now

RECENT_WINDOW = timedelta(hours=24)

TZ_OFFSETS_HOURS: dict[str, float] = {
    "UTC": 0,
    "GMT": 0,
    "WET": 0,
    "WEST": 1,
    "BST": 1,
    "CET": 1,
    "CEST": 2,
    "EET": 2,
    "EEST": 3,
    "MSK": 3,
    "IST": 5.5,
    "JST": 9,
    "AEST": 10,
    "AEDT": 11,
    "ART": -3,
    "BRT": -3,
    "CLT": -4,
    "EDT": -4,
    "EST": -5,
    "CDT": -5,
    "COT": -5,
    "PET": -5,
    "CST": -6,
    "MDT": -6,
    "MST": -7,
    "PDT": -7,
    "PST": -8,
}

MONTHS_EN = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}
MONTHS_ES = {
    "enero": 1,
    "febrero": 2,
    "marzo": 3,
    "abril": 4,
    "mayo": 5,
    "junio": 6,
    "julio": 7,
    "agosto": 8,
    "septiembre": 9,
    "setiembre": 9,
    "octubre": 10,
    "noviembre": 11,
    "diciembre": 12,
}
MONTH_ABBR_EN = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "sept": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}
MONTH_ABBR_ES = {
    "ene": 1,
    "feb": 2,
    "mar": 3,
    "abr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "ago": 8,
    "sep": 9,
    "sept": 9,
    "oct": 10,
    "nov": 11,
    "dic": 12,
}
WEEKDAYS = frozenset(
    {
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
        "lunes", "martes", "miercoles", "jueves", "viernes", "sabado", "domingo",
    }
)

_FULL_MONTHS = {**MONTHS_ES, **MONTHS_EN}
_ABBR_MONTHS = {**MONTH_ABBR_ES, **MONTH_ABBR_EN}

_DIGITS = re.compile(r"\d+")
_TZ_ABBR = re.compile(r"(\d{4}-\d{2}-\d{2})\s*([A-Za-z]{2,5})\s*(\d{2}:\d{2}:\d{2})")
_MONTH_PREAMBLE = re.compile(
    r",\s*(?P<month_en>[A-Za-z]+)\.?\s+(?P<day>\d{1,2}),\s*(?P<year>\d{4})\s*$"
)
_RELATIVE_EN = re.compile(r"(\d+)\s+(minute|hour|day|week|month)s?\s+ago")
_RELATIVE_ES = re.compile(r"hace\s+(\d+)\s+(minutos?|horas?|dias?|semanas?|mes(?:es)?)")
_SPANISH_NATURAL = re.compile(
    r"(?:(?P<day>\d{1,2})\s+(?:de\s+)?)?(?P<month>[a-z]+)\.?(?:\s+(?:de|del)\s+(?P<year>\d{4}))?"
)

_RELATIVE_UNITS = {
    "minute": "minutes",
    "minuto": "minutes",
    "hour": "hours",
    "hora": "hours",
    "day": "days",
    "dia": "days",
    "week": "weeks",
    "semana": "weeks",
    "month": "months",
    "mes": "months",
}

# Tried in order against the accent-stripped, lower-cased text; day/month
# orderings come before their month/day counterparts.
_LOCALE_FORMATS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("dd/MM/yyyy", re.compile(r"(?P<day>\d{1,2})/(?P<month>\d{1,2})/(?P<year>\d{4})")),
    ("MM/dd/yyyy", re.compile(r"(?P<month>\d{1,2})/(?P<day>\d{1,2})/(?P<year>\d{4})")),
    ("dd-MM-yyyy", re.compile(r"(?P<day>\d{1,2})-(?P<month>\d{1,2})-(?P<year>\d{4})")),
    ("yyyy-MM-dd", re.compile(r"(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})")),
    ("d MMMM yyyy", re.compile(r"(?P<day>\d{1,2}) (?P<month_name>[a-z]+) (?P<year>\d{4})")),
    ("MMMM d, yyyy", re.compile(r"(?P<month_name>[a-z]+) (?P<day>\d{1,2}),? (?P<year>\d{4})")),
    ("d MMM yyyy", re.compile(r"(?P<day>\d{1,2}) (?P<month_abbr>[a-z]+)\.? (?P<year>\d{4})")),
    ("MMM d, yyyy", re.compile(r"(?P<month_abbr>[a-z]+)\.? (?P<day>\d{1,2}),? (?P<year>\d{4})")),
    (
        "d 'de' MMMM 'de' yyyy",
        re.compile(r"(?P<day>\d{1,2}) de (?P<month_name>[a-z]+) de (?P<year>\d{4})"),
    ),
    (
        "yyyy-MM-dd HH:mm:ss",
        re.compile(
            r"(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2}) "
            r"(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})"
        ),
    ),
    (
        "EEEE d 'de' MMMM",
        re.compile(r"(?P<weekday>[a-z]+),? (?P<day>\d{1,2}) de (?P<month_name>[a-z]+)"),
    ),
)


def _fold(text: str) -> str:
    return collapse_whitespace(strip_accents(text).lower())


class DateRecognizer:
    """Decide whether free-form publication date text is within the recent window."""

    def __init__(
        self,
        now: Callable[[], datetime] = utc_now,
        tz: tzinfo = timezone.utc,
        window: timedelta = RECENT_WINDOW,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self._now = now
        self.tz = tz
        self.window = window
        self.logger = logger or structlog.get_logger("news_crawler.dates")
        self._rules: tuple[Callable[[str], Optional[datetime]], ...] = (
            self._epoch_seconds,
            self._iso_8601,
            self._tz_abbreviation,
            self._slash_datetime,
            self._dash_datetime,
            self._month_preamble,
            self._relative_phrase,
            self._locale_formats,
            self._spanish_natural,
        )

    def now(self) -> datetime:
        current = self._now()
        if current.tzinfo is None:
            current = current.replace(tzinfo=self.tz)
        return current

    def recognize(self, text: str | None) -> datetime | None:
        """Return the aware timestamp for ``text`` or ``None`` when no rule matches."""

        if not text:
            return None
        cleaned = collapse_whitespace(text)
        if not cleaned:
            return None
        for rule in self._rules:
            parsed = rule(cleaned)
            if parsed is not None:
                return self._aware(parsed)
        return None

    def is_recent(self, text: str | None) -> bool:
        parsed = self.recognize(text)
        if parsed is None:
            self.logger.debug("date_unrecognised", text=text)
            return False
        return self.now() - parsed < self.window

    # ------------------------------------------------------------------
    # Rules, in chain order
    # ------------------------------------------------------------------
    def _epoch_seconds(self, text: str) -> datetime | None:
        if not _DIGITS.fullmatch(text):
            return None
        try:
            return datetime.fromtimestamp(int(text), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    def _iso_8601(self, text: str) -> datetime | None:
        candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
        try:
            return datetime.fromisoformat(candidate)
        except ValueError:
            return None

    def _tz_abbreviation(self, text: str) -> datetime | None:
        match = _TZ_ABBR.fullmatch(text)
        if not match:
            return None
        day, abbreviation, clock = match.groups()
        try:
            naive = datetime.strptime(f"{day} {clock}", "%Y-%m-%d %H:%M:%S")
        except ValueError:
            return None
        offset = TZ_OFFSETS_HOURS.get(abbreviation.upper(), 0)
        return naive.replace(tzinfo=timezone(timedelta(hours=offset)))

    def _slash_datetime(self, text: str) -> datetime | None:
        return self._strptime(text, "%d/%m/%Y %H:%M")

    def _dash_datetime(self, text: str) -> datetime | None:
        return self._strptime(text, "%d-%m-%Y %H:%M:%S")

    def _month_preamble(self, text: str) -> datetime | None:
        match = _MONTH_PREAMBLE.search(text)
        if not match:
            return None
        name = match.group("month_en").lower()
        month = MONTHS_EN.get(name) or MONTH_ABBR_EN.get(name)
        if month is None:
            return None
        return self._build(int(match.group("year")), month, int(match.group("day")))

    def _relative_phrase(self, text: str) -> datetime | None:
        folded = _fold(text)
        match = _RELATIVE_ES.search(folded) or _RELATIVE_EN.search(folded)
        if not match:
            return None
        amount = int(match.group(1))
        unit = match.group(2)
        key = "mes" if unit.startswith("mes") else unit.rstrip("s")
        field = _RELATIVE_UNITS[key]
        try:
            return self.now() - relativedelta(**{field: amount})
        except (OverflowError, ValueError):
            return None

    def _locale_formats(self, text: str) -> datetime | None:
        folded = _fold(text)
        for _name, pattern in _LOCALE_FORMATS:
            match = pattern.fullmatch(folded)
            if not match:
                continue
            parsed = self._from_groups(match.groupdict())
            if parsed is not None:
                return parsed
        return None

    def _spanish_natural(self, text: str) -> datetime | None:
        match = _SPANISH_NATURAL.fullmatch(_fold(text))
        if not match:
            return None
        month = _spanish_month(match.group("month"))
        if month is None:
            return None
        day = int(match.group("day")) if match.group("day") else 1
        year = int(match.group("year")) if match.group("year") else self.now().astimezone(self.tz).year
        return self._build(year, month, day)

    # ------------------------------------------------------------------
    def _from_groups(self, groups: dict[str, str | None]) -> datetime | None:
        if groups.get("weekday") is not None and groups["weekday"] not in WEEKDAYS:
            return None
        if groups.get("month_name") is not None:
            month = _FULL_MONTHS.get(groups["month_name"])
        elif groups.get("month_abbr") is not None:
            month = _ABBR_MONTHS.get(groups["month_abbr"])
        else:
            month = int(groups["month"]) if groups.get("month") else None
        if month is None:
            return None
        year = int(groups["year"]) if groups.get("year") else self.now().astimezone(self.tz).year
        return self._build(
            year,
            month,
            int(groups["day"]),
            int(groups.get("hour") or 0),
            int(groups.get("minute") or 0),
            int(groups.get("second") or 0),
        )

    @staticmethod
    def _build(
        year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0
    ) -> datetime | None:
        try:
            return datetime(year, month, day, hour, minute, second)
        except (OverflowError, ValueError):
            return None

    @staticmethod
    def _strptime(text: str, fmt: str) -> datetime | None:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            return None

    def _aware(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self.tz)
        return value


def _spanish_month(token: str) -> int | None:
    if token in MONTH_ABBR_ES:
        return MONTH_ABBR_ES[token]
    if len(token) < 3:
        return None
    for name, number in MONTHS_ES.items():
        if name.startswith(token):
            return number
    return None


_default = DateRecognizer()


def is_recent(date_text: str | None) -> bool:
    """Module-level shortcut using the wall clock."""

    return _default.is_recent(date_text)


__all__ = ["DateRecognizer", "RECENT_WINDOW", "TZ_OFFSETS_HOURS", "is_recent"]
