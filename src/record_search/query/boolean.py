"""Boolean query parsing (`AND` / `OR` / `NOT`).

Operators are upper-case keywords separated from their operands by
whitespace. Parsing splits on the first occurrence of an operator, trying
`AND`, then `OR`, then binary `NOT`, then a leading unary `NOT`, and recurses
into both sides. There is no precedence table: ``"a OR b AND c"`` splits on
`AND` first and becomes ``AND(OR(a, b), c)``, while ``"a AND b OR c"``
becomes ``AND(a, OR(b, c))``. Text that cannot be split stays a
`SimpleQuery`.
"""

from __future__ import annotations

import re

from record_search.query.tokenizer import tokenize
from record_search.types import BooleanOperator, BooleanQuery, ParsedQuery, SimpleQuery

_BINARY_PATTERNS = (
    (BooleanOperator.AND, re.compile(r"^(.*?)\s+AND\s+(.*)$", re.DOTALL)),
    (BooleanOperator.OR, re.compile(r"^(.*?)\s+OR\s+(.*)$", re.DOTALL)),
    (BooleanOperator.NOT, re.compile(r"^(.*?)\s+NOT\s+(.*)$", re.DOTALL)),
)
_UNARY_NOT = re.compile(r"^NOT\s+(.*)$", re.DOTALL)
_OPERATOR_WORD = re.compile(r"(?:^|\s)(?:AND|OR|NOT)\s")


def is_boolean_query(query: str) -> bool:
    return isinstance(parse_boolean_query(query), BooleanQuery)


def parse_boolean_query(query: str) -> ParsedQuery:
    text = query.strip()
    if not _OPERATOR_WORD.search(text):
        return SimpleQuery(text)

    for operator, pattern in _BINARY_PATTERNS:
        match = pattern.match(text)
        if match is None:
            continue
        left, right = match.group(1).strip(), match.group(2).strip()
        if not left or not right:
            continue
        return BooleanQuery(
            operator=operator,
            left=parse_boolean_query(left),
            right=parse_boolean_query(right),
        )

    match = _UNARY_NOT.match(text)
    if match is not None and match.group(1).strip():
        return BooleanQuery(
            operator=BooleanOperator.NOT,
            left=parse_boolean_query(match.group(1)),
        )
    return SimpleQuery(text)


def simple_leaves(parsed: ParsedQuery) -> list[SimpleQuery]:
    if isinstance(parsed, SimpleQuery):
        return [parsed]
    leaves = simple_leaves(parsed.left)
    if parsed.right is not None:
        leaves.extend(simple_leaves(parsed.right))
    return leaves


def extract_search_terms(query: str) -> list[str]:
    """Distinct lowercase tokens of every simple leaf, in query order."""
    terms: list[str] = []
    for leaf in simple_leaves(parse_boolean_query(query)):
        for token in tokenize(leaf.text):
            if token not in terms:
                terms.append(token)
    return terms
