"""Currency amount parsing and the progressive-restriction matcher.

Amounts typed by a user are compared to record values in two ways:

1. Numerically, through `is_close_match` (absolute tolerance, 0.01 by default).
2. As strings, through `matches_monetary_string`. The more of the number the
   user types, the stricter the comparison:

   - exact string equality always matches;
   - a query with decimal digits (``"800.50"``) only matches near-exact values
     once trailing fractional zeros are dropped on both sides;
   - a query ending in a bare dot (``"800."``) matches any value whose digits
     start with the whole part;
   - whole-number queries use prefix matching, gated by the query's digit
     count: one digit only compares first digits, two and three digit
     queries need the value to start with them, four or more digits also
     match a shorter value that the query starts with.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from record_search.query.tokenizer import tokenize
from record_search.types import PriceRange

_FLOAT_PREFIX = re.compile(r"^\+?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+]?\d+)?")
_CURRENCY_NOISE = re.compile(r"[$,\s]")
_ALL_DIGITS = re.compile(r"^[0-9]+$")

# Tried in order, first match wins. The dollar sign on the lower bound is
# optional so that "1000-$2000" (an explicit query with its leading `$`
# already stripped) still resolves as a range.
_RANGE_PATTERNS = (
    re.compile(r"(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)"),
    re.compile(r"(\d+(?:\.\d+)?)\s+to\s+(\d+(?:\.\d+)?)", re.IGNORECASE),
    re.compile(r"\$?(\d+(?:\.\d+)?)\s*-\s*\$(\d+(?:\.\d+)?)"),
    re.compile(r"\$?(\d+(?:\.\d+)?)\s+to\s+\$(\d+(?:\.\d+)?)", re.IGNORECASE),
)


@dataclass(slots=True, frozen=True)
class MonetaryQuery:
    is_monetary: bool
    search_query: str
    original_query: str


@dataclass(slots=True)
class MonetaryTokens:
    """Query split into currency amounts, free text and an optional range."""

    amounts: list[float] = field(default_factory=list)
    text_tokens: list[str] = field(default_factory=list)
    range: PriceRange | None = None
    amount_tokens: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.amounts and not self.text_tokens and self.range is None


def parse_monetary_query(query: str) -> MonetaryQuery:
    """Detect an explicit monetary query (leading `$`) and strip the sign."""
    trimmed = query.strip()
    if trimmed.startswith("$"):
        return MonetaryQuery(
            is_monetary=True,
            search_query=trimmed[1:].strip(),
            original_query=query,
        )
    return MonetaryQuery(is_monetary=False, search_query=query, original_query=query)


def has_monetary_potential(text: str) -> bool:
    """Whether a non-`$` query is worth trying against monetary fields."""
    stripped = text.strip()
    if not stripped:
        return False
    if "$" in stripped or "." in stripped or "," in stripped:
        return True
    if _ALL_DIGITS.match(stripped):
        return True
    return parse_range_query(stripped) is not None


def parse_float_prefix(text: str) -> float | None:
    """Parse the leading number of `text`, ignoring anything after it."""
    match = _FLOAT_PREFIX.match(text.strip())
    if match is None:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


def parse_currency_string(token: str) -> float | None:
    cleaned = _CURRENCY_NOISE.sub("", token)
    if "-" in cleaned or " to " in cleaned.lower():
        return None
    return parse_float_prefix(cleaned)


def parse_range_query(query: str) -> PriceRange | None:
    for pattern in _RANGE_PATTERNS:
        match = pattern.search(query)
        if match is None:
            continue
        low = float(match.group(1))
        high = float(match.group(2))
        if low <= high:
            return PriceRange(min=low, max=high)
    return None


def extract_monetary_tokens(query: str) -> MonetaryTokens:
    """Classify query tokens as amounts or text; a range short-circuits both."""
    price_range = parse_range_query(query)
    if price_range is not None:
        return MonetaryTokens(range=price_range)

    result = MonetaryTokens()
    for token in tokenize(query):
        amount = parse_currency_string(token)
        if amount is None:
            result.text_tokens.append(token)
        else:
            result.amounts.append(amount)
            result.amount_tokens.append(token)
    return result


def is_close_match(a: float, b: float, tolerance: float = 0.01) -> bool:
    return abs(a - b) <= tolerance


def number_to_string(value: float) -> str:
    """Shortest round-trip form, without a trailing `.0` on whole numbers."""
    if math.isfinite(value) and value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


def normalize_monetary_string(value: str | float) -> str:
    text = value if isinstance(value, str) else number_to_string(value)
    return _CURRENCY_NOISE.sub("", text)


def matches_monetary_string(query: str, data: str | float) -> bool:
    """Progressive-restriction comparison of a typed amount against a value."""
    q = normalize_monetary_string(query)
    d = normalize_monetary_string(data)
    if not q or not d:
        return False
    if q == d:
        return True

    if "." in q:
        whole, _, fraction = q.partition(".")
        if fraction:
            q_significant = _strip_fraction_zeros(q)
            d_significant = _strip_fraction_zeros(d)
            if q_significant == d_significant:
                return True
            return "." in d_significant and q_significant.startswith(d_significant)
        return bool(whole) and d.startswith(whole)

    if not _ALL_DIGITS.match(q):
        return False
    d_whole = d.partition(".")[0]
    if not _ALL_DIGITS.match(d_whole):
        return False

    digits = len(q)
    if digits == 1:
        return d_whole[0] == q

    if d.startswith(q):
        return True
    if digits < 4:
        return False
    return len(d_whole) < digits and q.startswith(d_whole)


def _strip_fraction_zeros(value: str) -> str:
    if "." not in value:
        return value
    return value.rstrip("0").rstrip(".")
