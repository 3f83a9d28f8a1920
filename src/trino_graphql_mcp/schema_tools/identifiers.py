"""Identifier codec for the produced API schema.

Catalog, schema, table and column names coming from the query engine may
contain characters the API identifier grammar rejects (``-``, ``.``, spaces,
non-ASCII letters, a leading digit...). This module rewrites such names into
the grammar ``^[_A-Za-z][_0-9A-Za-z]*$`` by replacing each offending code
point with an escape token ``_U<HEX>_`` and restores them back.

Functions:
- sanitize(): Escape a raw metadata name into a grammar-conformant name
- restore(): Decode escape tokens back into their code points
- is_valid_name(): Check a name against the identifier grammar

Known limitation: conformant names are returned by ``sanitize`` unchanged,
so ``restore`` decodes any token shape they literally contain. Names such as
``col_U0041_`` are therefore not recoverable after a round trip.
"""

from __future__ import annotations

import re

from .constants import Constants


def _is_word_char(ch: str) -> bool:
    return ch == "_" or ("A" <= ch <= "Z") or ("a" <= ch <= "z") or ("0" <= ch <= "9")


def _escape(ch: str) -> str:
    return f"_U{ord(ch):04X}_"


def is_valid_name(name: str) -> bool:
    """Return True when ``name`` satisfies the identifier grammar."""
    return Constants.VALID_NAME_PATTERN.match(name) is not None


def sanitize(name: str) -> str:
    """Rewrite ``name`` so that it satisfies the identifier grammar.

    Already-conformant names are returned unchanged. Otherwise every code
    point outside ``[A-Za-z0-9_]`` is replaced by ``_U<HEX>_`` where ``<HEX>``
    is the uppercase code point padded to at least four digits. A leading
    digit is escaped as well, and so is every underscore that opens a
    ``_U<HEX>`` run; restoring the result always yields ``name`` again.

    Args:
        name: Raw metadata name as reported by the engine

    Returns:
        Grammar-conformant name. The empty string maps to ``"_"``.

    Example:
        >>> sanitize("order-items")
        'order_U002D_items'
        >>> sanitize("2024_sales")
        '_U0032_024_sales'
    """
    if is_valid_name(name):
        return name
    if not name:
        return "_"

    token_starts = {m.start() for m in Constants.TOKEN_PREFIX_PATTERN.finditer(name)}
    parts: list[str] = []
    for index, ch in enumerate(name):
        if not _is_word_char(ch) or (index == 0 and ch.isdigit()) or index in token_starts:
            parts.append(_escape(ch))
        else:
            parts.append(ch)
    return "".join(parts)


def _decode_token(match: re.Match[str]) -> str:
    try:
        return chr(int(match.group(1), 16))
    except (ValueError, OverflowError):
        # Outside the Unicode range: keep the literal token
        return match.group(0)


def restore(name: str) -> str:
    """Decode every ``_U<HEX>_`` escape token in ``name``.

    The input does not need to come from :func:`sanitize`; characters that are
    not part of a well-formed token are left untouched and malformed tokens
    are treated as literal text. This function never raises.

    Args:
        name: Possibly sanitized name

    Returns:
        Name with escape tokens replaced by their code points
    """
    return Constants.ESCAPE_TOKEN_PATTERN.sub(_decode_token, name)
