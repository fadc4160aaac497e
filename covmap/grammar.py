"""
Cursor based extraction of entries from ClickHouse's text rendering of maps,
tuples and arrays, e.g. {1:('f',3,(3,0,5,1),(5,1,5,2))} or [(0,0,1,1),(0,1,1,2)].

Parsing never fails as a whole: scan() tries to read an entry at every position
of the text and moves forward when there is none, so corrupted parts are
skipped and everything that can be read is returned.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from .records import Position
from .scalars import UINT32_MAX, parse_decimal

T = TypeVar("T")

DIGITS_RE = re.compile(r"[0-9]+")
SEPARATORS = ", \t\r\n"


class NoMatch(Exception):
    """The text at the cursor does not fit the expected production"""


class TextIndex:
    """
    Lookups shared by all the cursors of one scan. Every attempt to read an
    entry may search far ahead (closing bracket, closing quote), the index keeps
    the whole scan linear in the size of the text.
    """

    def __init__(self, text: str):
        self.text = text
        self._pairs = {}  # type: Dict[Tuple[str, str], Dict[int, int]]
        # no quote in [_quote_from, _quote_at), -1 means none up to the end
        self._quote_from = len(text) + 1
        self._quote_at = -1

    def closing_bracket(self, pos: int, opening: str, closing: str) -> int:
        """Position of the bracket closing the one at pos, -1 when unbalanced"""
        if (opening, closing) not in self._pairs:
            pairs = {}  # type: Dict[int, int]
            stack = []  # type: List[int]
            for i, char in enumerate(self.text):
                if char == opening:
                    stack.append(i)
                elif char == closing and stack:
                    pairs[stack.pop()] = i
            self._pairs[(opening, closing)] = pairs
        return self._pairs[(opening, closing)].get(pos, -1)

    def next_quote(self, pos: int) -> int:
        """Position of the first ' at or after pos, -1 when there is none"""
        if pos < self._quote_from or -1 < self._quote_at < pos:
            self._quote_from = pos
            self._quote_at = self.text.find("'", pos)
        return self._quote_at


class Cursor:
    def __init__(self, text: str, pos: int = 0, index: Optional[TextIndex] = None):
        self.text = text
        self.pos = pos
        self.index = index or TextIndex(text)

    def expect(self, literal: str) -> None:
        if not self.text.startswith(literal, self.pos):
            raise NoMatch(f"[{literal}] expected at {self.pos}")
        self.pos += len(literal)

    def uint(self, max_value: int = UINT32_MAX) -> int:
        match = DIGITS_RE.match(self.text, self.pos)
        if not match:
            raise NoMatch(f"number expected at {self.pos}")
        self.pos = match.end()
        # out of range values saturate to the maximum of the field
        return parse_decimal(match.group(), max_value)

    def quoted(self) -> str:
        # no escape sequences, an embedded quote ends the field
        self.expect("'")
        end = self.index.next_quote(self.pos)
        if end < 0:
            raise NoMatch(f"unterminated quote at {self.pos - 1}")
        value = self.text[self.pos : end]  # noqa: E203
        self.pos = end + 1
        return value

    def position(self) -> Position:
        self.expect("(")
        first = self.uint()
        self.expect(",")
        second = self.uint()
        self.expect(",")
        third = self.uint()
        self.expect(",")
        fourth = self.uint()
        self.expect(")")
        return first, second, third, fourth

    def bracketed(self, opening: str = "[", closing: str = "]") -> str:
        """Returns the text between an opening bracket and its matching closing one"""
        end = self.index.closing_bracket(self.pos, opening, closing)
        self.expect(opening)
        if end < 0:
            raise NoMatch(f"unbalanced [{opening}] at {self.pos - 1}")
        value = self.text[self.pos : end]  # noqa: E203
        self.pos = end + 1
        return value


@dataclass
class ScanResult(Generic[T]):
    items: List[T] = field(default_factory=list)
    # runs of text between matched items that contain digits and were not read
    skipped: List[str] = field(default_factory=list)


def _add_skipped(result: ScanResult, fragment: str) -> None:
    if DIGITS_RE.search(fragment):
        result.skipped.append(fragment.strip(SEPARATORS))


def scan(text: str, read_item: Callable[[Cursor], T]) -> ScanResult[T]:
    result = ScanResult()  # type: ScanResult[T]
    index = TextIndex(text)
    pos = 0
    unread_from = 0
    while pos < len(text):
        cursor = Cursor(text, pos, index)
        try:
            item = read_item(cursor)
        except NoMatch:
            # an attempt from inside a digit run reads the same run and fails the same way
            digits = DIGITS_RE.match(text, pos)
            pos = digits.end() if digits else pos + 1
            continue
        _add_skipped(result, text[unread_from:pos])
        result.items.append(item)
        pos = unread_from = cursor.pos
    _add_skipped(result, text[unread_from:])
    return result


def strip_braces(text: str) -> str:
    text = text.strip()
    if text.startswith("{"):
        text = text[1:]
    if text.endswith("}"):
        text = text[:-1]
    return text


def read_keyed(cursor: Cursor, read_payload: Callable[[Cursor], T]) -> Tuple[int, T]:
    """key:(payload)"""
    key = cursor.uint()
    cursor.expect(":(")
    payload = read_payload(cursor)
    cursor.expect(")")
    return key, payload
