"""Gmail search query builder for the searches the agent runs."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Union


def construct_query(**query_terms) -> str:
    """Build a Gmail search query; every keyword term must match.

    ``in`` is a Python keyword, so the folder term is spelled ``folder``.

    Keyword Arguments:
        folder, subject, after, newer_than, unread
    """
    terms = []
    for key, val in query_terms.items():
        query_fn = _TERMS.get(key)
        if query_fn is None:
            raise ValueError(f"Unsupported query term: {key!r}")

        if key == 'newer_than':
            terms.append(query_fn(*val))
        elif isinstance(val, bool):
            if val:
                terms.append(query_fn())
        else:
            terms.append(query_fn(val))

    return _and(terms)


def _and(queries: List[str]) -> str:
    if len(queries) == 1:
        return queries[0]
    return f'({" ".join(queries)})'


def _quote(value: str) -> str:
    if ' ' in value and not value.startswith('"'):
        return f'"{value}"'
    return value


def _timestamp(value: Union[datetime, date, int, str]) -> str:
    # Gmail reads a bare integer as epoch seconds, which keeps sub-day precision
    if isinstance(value, datetime):
        return str(int(value.timestamp()))
    if isinstance(value, date):
        return value.strftime('%Y/%m/%d')
    return str(value)


def _folder(folder_name: str) -> str:
    return f'in:{folder_name}'


def _subject(subject: str) -> str:
    return f'subject:{_quote(subject)}'


def _after(value: Union[datetime, date, int, str]) -> str:
    return f'after:{_timestamp(value)}'


def _newer_than(number: int, unit: str) -> str:
    return f'newer_than:{number}{unit[0]}'


def _unread() -> str:
    return 'is:unread'


_TERMS = {
    'folder': _folder,
    'subject': _subject,
    'after': _after,
    'newer_than': _newer_than,
    'unread': _unread,
}

