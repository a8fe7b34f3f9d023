"""Formatting and small collection helpers shared by the API and the CLI."""

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Union

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

INVESTMENT_TYPE_LABELS = {
    'bond': 'Bond',
    'fixed_deposit': 'Fixed Deposit',
    'fd': 'Fixed Deposit',
    'mutual_fund': 'Mutual Fund',
    'mf': 'Mutual Fund',
    'etf': 'ETF',
    'other': 'Other',
}

Number = Union[int, float, Decimal, str]


def _group_indian(digits: str) -> str:
    """Group an integer digit string the Indian way: 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(amount: Number, decimals: int = 0, symbol: str = "₹") -> str:
    """
    Format an amount in Indian Rupees with lakh/crore digit grouping.

    >>> format_currency(1234567)
    '₹12,34,567'
    """
    if amount is None:
        amount = 0
    value = Decimal(str(amount))
    quant = Decimal(1).scaleb(-decimals)
    value = value.quantize(quant, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    integer_part, _, fraction = f"{abs(value):f}".partition(".")
    formatted = _group_indian(integer_part)
    if decimals > 0:
        formatted = f"{formatted}.{fraction}"
    return f"{sign}{symbol}{formatted}"


def format_number(num: Number) -> str:
    """Insert thousands separators every three digits."""
    text = str(num)
    integer_part, dot, fraction = text.partition(".")
    sign = ""
    if integer_part.startswith("-"):
        sign, integer_part = "-", integer_part[1:]
    integer_part = re.sub(r"\B(?=(\d{3})+(?!\d))", ",", integer_part)
    return f"{sign}{integer_part}{dot}{fraction}"


def format_date(value: Union[str, date, datetime]) -> str:
    """Format a date as '19 Oct 2026'. Accepts ISO strings."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace('Z', '+00:00'))
    return f"{value.day} {value.strftime('%b %Y')}"


def calculate_percentage(value: Number, total: Number) -> float:
    """Percentage of value in total, rounded to 2 places. 0 when total is 0."""
    total = float(total or 0)
    if total == 0:
        return 0.0
    return round(float(value or 0) / total * 100, 2)


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + '...'


def sort_by_key(items: Iterable[dict], key: str, order: str = 'asc') -> List[dict]:
    """Return a sorted copy; order is 'asc' or 'desc'."""
    return sorted(items, key=lambda item: item[key], reverse=(order == 'desc'))


def filter_by_search(items: Iterable[dict], term: str, keys: List[str]) -> List[dict]:
    """Case-insensitive substring match of term against any of keys."""
    term = term.lower()
    return [
        item for item in items
        if any(item.get(k) is not None and term in str(item[k]).lower() for k in keys)
    ]


def get_investment_type_label(investment_type: Optional[str]) -> Optional[str]:
    return INVESTMENT_TYPE_LABELS.get(investment_type, investment_type)


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def is_strong_password(password: Optional[str]) -> bool:
    """Length >= 8 with upper, lower, digit and a non-alphanumeric character."""
    if not password:
        return False
    return (
        len(password) >= 8
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"[a-z]", password) is not None
        and re.search(r"[0-9]", password) is not None
        and re.search(r"[^A-Za-z0-9]", password) is not None
    )
