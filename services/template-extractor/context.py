"""Locate a field value in the document and collect the words around it.

The document is split into word runs, whitespace runs and single
punctuation marks. A value is bound to its first token-aligned occurrence;
repeated values always resolve to the leftmost one. Only tokens containing
a letter count toward the window size, so punctuation and numbers ride
along with the words next to them. A side never holds more than
TOKENS_PER_WORD tokens per word of budget, so numeric runs stay bounded.
"""

import re
from typing import NamedTuple

_TOKEN = re.compile(r"\w+|\s+|[^\w\s]")

DEFAULT_WINDOW_WORDS = 5

# Hard cap on tokens per side, in multiples of the word budget
TOKENS_PER_WORD = 4


class ContextWindow(NamedTuple):
    before: str
    after: str


EMPTY_WINDOW = ContextWindow("", "")


def tokenize(text: str) -> list[str]:
    return _TOKEN.findall(text)


def _is_word(token: str) -> bool:
    return any(ch.isalpha() for ch in token)


def find_span(tokens: list[str], value_tokens: list[str]) -> tuple[int, int] | None:
    """Return the inclusive (start, end) of the first exact token match, or None."""
    n = len(value_tokens)
    if n == 0:
        return None
    first = value_tokens[0]
    for i in range(len(tokens) - n + 1):
        if tokens[i] == first and tokens[i:i + n] == value_tokens:
            return i, i + n - 1
    return None


def _collect(tokens: list[str], indices: range, words: int) -> list[str]:
    collected: list[str] = []
    count = 0
    max_tokens = words * TOKENS_PER_WORD
    for i in indices:
        token = tokens[i]
        if count >= words or len(collected) >= max_tokens:
            # Keep the spacing next to the last word, then stop
            if token.isspace():
                collected.append(token)
            break
        collected.append(token)
        if _is_word(token):
            count += 1
    return collected


class ContextResolver:
    """Resolves context windows against one tokenized document."""

    def __init__(self, document_text: str, words: int = DEFAULT_WINDOW_WORDS):
        self._tokens = tokenize(document_text)
        self._words = words

    def resolve(self, value: str) -> ContextWindow:
        """Return the text before and after the first occurrence of ``value``.

        Values that do not appear token-for-token yield an empty window.
        """
        span = find_span(self._tokens, tokenize(value.strip()))
        if span is None or self._words <= 0:
            return EMPTY_WINDOW

        start, end = span
        before = _collect(self._tokens, range(start - 1, -1, -1), self._words)
        after = _collect(self._tokens, range(end + 1, len(self._tokens)), self._words)
        return ContextWindow(
            before="".join(reversed(before)).strip(),
            after="".join(after).strip(),
        )


def resolve_context(document_text: str, value: str, words: int = DEFAULT_WINDOW_WORDS) -> ContextWindow:
    return ContextResolver(document_text, words).resolve(value)


def format_full_context(before: str, value: str, after: str) -> str:
    return f"...{before}【{value}】{after}..."
