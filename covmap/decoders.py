import logging
from typing import Dict, Generic, List, Optional, Tuple, Type, TypeVar

from .grammar import Cursor, read_keyed, scan, strip_braces
from .records import (
    BranchInfo,
    BranchMap,
    FunctionInfo,
    FunctionMap,
    Position,
    StatementInfo,
    StatementMap,
)
from .scalars import UINT8_MAX

logger = logging.getLogger(__name__)

V = TypeVar("V")

# decoded value and fragments skipped inside it
Payload = Tuple[V, List[str]]


class MapDecodeError(ValueError):
    """Raised in strict mode when some fragments of the text were not decoded"""

    def __init__(self, kind: str, fragments: List[str]):
        self.kind = kind
        self.fragments = fragments
        preview = ", ".join(fragments[:3])
        if len(fragments) > 3:
            preview += ", ..."
        super().__init__(
            f"{kind}: {len(fragments)} fragment(s) could not be decoded: {preview}"
        )


def decode_paths(text: str) -> Tuple[Position, ...]:
    """
    Reads the content of a branch's path list, i.e. the text between [ and ].
    Order is kept and duplicates are not removed: the index of a path is the
    index of the branch alternative.
    """
    return tuple(scan(text, Cursor.position).items)


class _MapDecoder(Generic[V]):
    KIND = ""

    @classmethod
    def _read_payload(cls, cursor: Cursor) -> Payload:
        raise NotImplementedError

    @classmethod
    def _read_entry(cls, cursor: Cursor) -> Tuple[int, Payload]:
        return read_keyed(cursor, cls._read_payload)

    @classmethod
    def decode_with_report(cls, text: Optional[str]) -> Tuple[Dict[int, V], List[str]]:
        """Decodes text, returns the map and the fragments that were skipped"""
        result = {}  # type: Dict[int, V]
        if not text:
            return result, []
        scanned = scan(strip_braces(text), cls._read_entry)
        skipped = list(scanned.skipped)
        for key, (value, inner_skipped) in scanned.items:
            # the last entry with the same key wins
            result[key] = value
            skipped.extend(inner_skipped)
        if skipped:
            logger.debug(
                "%s: %s entries decoded, %s fragments skipped",
                cls.KIND,
                len(result),
                len(skipped),
            )
        return result, skipped

    @classmethod
    def decode(cls, text: Optional[str], strict: bool = False) -> Dict[int, V]:
        result, skipped = cls.decode_with_report(text)
        if strict and skipped:
            raise MapDecodeError(cls.KIND, skipped)
        return result


class StatementMapDecoder(_MapDecoder[StatementInfo]):
    """{key:(line,column,length,count),...}"""

    KIND = "statement_map"

    @classmethod
    def _read_payload(cls, cursor: Cursor) -> Payload:
        line = cursor.uint()
        cursor.expect(",")
        column = cursor.uint()
        cursor.expect(",")
        length = cursor.uint()
        cursor.expect(",")
        count = cursor.uint()
        return StatementInfo(line=line, column=column, length=length, count=count), []


class FunctionMapDecoder(_MapDecoder[FunctionInfo]):
    """{key:('name',line,(start),(end)),...}"""

    KIND = "fn_map"

    @classmethod
    def _read_payload(cls, cursor: Cursor) -> Payload:
        name = cursor.quoted()
        cursor.expect(",")
        line = cursor.uint()
        cursor.expect(",")
        start_pos = cursor.position()
        cursor.expect(",")
        end_pos = cursor.position()
        return (
            FunctionInfo(name=name, line=line, start_pos=start_pos, end_pos=end_pos),
            [],
        )


class BranchMapDecoder(_MapDecoder[BranchInfo]):
    """{key:(type,line,(position),[(path),...]),...}"""

    KIND = "branch_map"

    @classmethod
    def _read_payload(cls, cursor: Cursor) -> Payload:
        branch_type = cursor.uint(UINT8_MAX)
        cursor.expect(",")
        line = cursor.uint()
        cursor.expect(",")
        position = cursor.position()
        cursor.expect(",")
        paths = scan(cursor.bracketed("[", "]"), Cursor.position)
        branch = BranchInfo(
            type=branch_type, line=line, position=position, paths=tuple(paths.items)
        )
        return branch, paths.skipped


def decode_statement_map(text: Optional[str], strict: bool = False) -> StatementMap:
    return StatementMapDecoder.decode(text, strict=strict)


def decode_function_map(text: Optional[str], strict: bool = False) -> FunctionMap:
    return FunctionMapDecoder.decode(text, strict=strict)


def decode_branch_map(text: Optional[str], strict: bool = False) -> BranchMap:
    return BranchMapDecoder.decode(text, strict=strict)


DECODERS = {
    "statement": StatementMapDecoder,
    "function": FunctionMapDecoder,
    "branch": BranchMapDecoder,
}  # type: Dict[str, Type[_MapDecoder]]
