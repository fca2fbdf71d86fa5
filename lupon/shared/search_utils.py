"""Search, status/date filtering and sorting for case lists.

Every list page (complaints, pending and withdrawn cases, mediation schedules,
referrals) runs its rows through apply_filters_and_sort() using the query
args sent by the search bar. Malformed rows are filtered out or given a
default sort key; nothing here raises on bad data.
"""

import calendar
import locale
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .clock import app_now, app_timezone

COMPLAINT_STATUS_OPTIONS = [
    {"value": "all", "label": "All Status"},
    {"value": "mediation", "label": "Mediation"},
    {"value": "conciliation", "label": "Conciliation"},
    {"value": "arbitration", "label": "Arbitration"},
    {"value": "settled", "label": "Settled"},
    {"value": "withdrawn", "label": "Withdrawn"},
]

REFERRAL_STATUS_OPTIONS = [
    {"value": "all", "label": "All Status"},
    {"value": "pending", "label": "Pending"},
    {"value": "transferred", "label": "Transferred"},
    {"value": "completed", "label": "Completed"},
]

MEDIATION_STATUS_OPTIONS = [
    {"value": "all", "label": "All Status"},
    {"value": "for_mediation", "label": "For Mediation"},
    {"value": "ongoing", "label": "Ongoing"},
    {"value": "settled", "label": "Settled"},
    {"value": "failed", "label": "Failed"},
]

SORT_OPTIONS = [
    {"value": "date_desc", "label": "Date Filed (Newest)"},
    {"value": "date_asc", "label": "Date Filed (Oldest)"},
    {"value": "title_asc", "label": "Title (A-Z)"},
    {"value": "title_desc", "label": "Title (Z-A)"},
    {"value": "status", "label": "Status"},
]

# Upstream statuses are written both as "for_mediation" and free text
# ("Mediation", "mediation ongoing"), so these filters match on substring.
STATUS_ALIASES = {
    "mediation": "for_mediation",
    "conciliation": "for_conciliation",
    "arbitration": "for_arbitration",
}

_EPOCH = datetime(1970, 1, 1)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class FilterOptions:
    search_query: str = ""
    status_filter: str = "all"
    date_filter: str = "all"
    sort_by: str = "date_desc"

    @classmethod
    def from_args(cls, args):
        """Build options from request query args (search, status, date, sort)."""
        return cls(
            search_query=(args.get("search") or "").strip(),
            status_filter=args.get("status") or "all",
            date_filter=args.get("date") or "all",
            sort_by=args.get("sort") or "date_desc",
        )


def field_value(record, field):
    """Read one field off a record: accessor callable, mapping key or attribute."""
    if callable(field):
        return field(record)
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def _name_of(value):
    if isinstance(value, Mapping):
        name = value.get("name")
    else:
        name = getattr(value, "name", None)
    return name if isinstance(name, str) else None


def _matches(value, term):
    if isinstance(value, str):
        return term in value.lower()

    if isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, str):
                if term in item.lower():
                    return True
                continue
            name = _name_of(item)
            if name is not None and term in name.lower():
                return True
        return False

    if value is None:
        return False
    name = _name_of(value)
    return name is not None and term in name.lower()


def status_matches(status, status_filter):
    item_status = status.lower() if isinstance(status, str) else ""
    wanted = status_filter.lower()

    alias = STATUS_ALIASES.get(wanted)
    if alias:
        return wanted in item_status or item_status == alias
    return item_status == wanted


def parse_timestamp(value):
    """datetime for a date-like value, or None when it is missing or unparsable"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, datetime.min.time())
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(app_timezone()).replace(tzinfo=None)
    return parsed


def one_month_before(moment):
    year, month = moment.year, moment.month - 1
    if month == 0:
        year, month = year - 1, 12
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def date_cutoff(date_filter, now):
    if date_filter == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_filter == "week":
        return now - timedelta(days=7)
    if date_filter == "month":
        return one_month_before(now)
    return None


def _date_sort_key(value):
    # missing < unparsable < any real date
    if not value:
        return (0, 0.0)
    parsed = parse_timestamp(value)
    if parsed is None:
        return (1, float("-inf"))
    return (1, (parsed - _EPOCH).total_seconds())


def _text_key(value):
    # case-insensitive first, exact spelling only breaks ties
    text = value if isinstance(value, str) else ""
    return locale.strxfrm(text.casefold()), locale.strxfrm(text)


def _id_key(value):
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else 0
    return 0


def apply_filters_and_sort(data, options, search_fields, date_field="date_filed", now=None):
    """Return a new, filtered and sorted list; ``data`` is left untouched.

    Stages run in order: search, status, date range, sort. ``search_fields``
    holds field names or accessor callables; a row matches the search when
    any of them contains the query (case-insensitive). Strings, lists of
    strings or named objects, and named objects are searchable; other values
    never match.
    """
    result = list(data)

    if options.search_query:
        term = options.search_query.lower()
        result = [
            item for item in result
            if any(_matches(field_value(item, field), term) for field in search_fields)
        ]

    if options.status_filter != "all":
        result = [
            item for item in result
            if status_matches(field_value(item, "status"), options.status_filter)
        ]

    if options.date_filter != "all":
        if now is None:
            now = app_now()
        elif now.tzinfo is not None:
            now = now.astimezone(app_timezone()).replace(tzinfo=None)
        cutoff = date_cutoff(options.date_filter, now)
        if cutoff is not None:
            kept = []
            for item in result:
                item_date = parse_timestamp(field_value(item, date_field))
                if item_date is not None and item_date >= cutoff:
                    kept.append(item)
            result = kept

    sort_by = options.sort_by
    if sort_by == "date_desc":
        result.sort(key=lambda item: _date_sort_key(field_value(item, date_field)), reverse=True)
    elif sort_by == "date_asc":
        result.sort(key=lambda item: _date_sort_key(field_value(item, date_field)))
    elif sort_by == "title_asc":
        result.sort(key=lambda item: _text_key(field_value(item, "case_title")))
    elif sort_by == "title_desc":
        result.sort(key=lambda item: _text_key(field_value(item, "case_title")), reverse=True)
    elif sort_by == "status":
        result.sort(key=lambda item: _text_key(field_value(item, "status")))
    else:
        # newest-created first
        result.sort(key=lambda item: _id_key(field_value(item, "id")), reverse=True)

    return result
