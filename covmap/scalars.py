import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

from .records import StatementInfo, StatementMap

logger = logging.getLogger(__name__)

UINT8_MAX = 0xFF
UINT32_MAX = 0xFFFFFFFF
UINT64_MAX = 0xFFFFFFFFFFFFFFFF
INT32_MIN = -(2**31)
INT64_MIN = -(2**63)


class ScalarKind(Enum):
    UINT32 = "UInt32"
    UINT64 = "UInt64"
    INT = "Int"
    INT32 = "Int32"
    INT64 = "Int64"
    UNSUPPORTED = "Unsupported"


@dataclass(frozen=True)
class Scalar:
    """
    A native value as delivered by a record source, tagged with its width.

    Every integer arm converts to uint32 with two's complement truncation,
    the UNSUPPORTED arm converts to 0.
    """

    kind: ScalarKind
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> "Scalar":
        # bool is an int subclass, but it is not a number in any of the columns
        if isinstance(value, bool) or not isinstance(value, int):
            return cls(ScalarKind.UNSUPPORTED, value)
        if 0 <= value <= UINT32_MAX:
            return cls(ScalarKind.UINT32, value)
        if UINT32_MAX < value <= UINT64_MAX:
            return cls(ScalarKind.UINT64, value)
        if INT32_MIN <= value < 0:
            return cls(ScalarKind.INT32, value)
        if INT64_MIN <= value < INT32_MIN:
            return cls(ScalarKind.INT64, value)
        return cls(ScalarKind.INT, value)

    def to_uint32(self) -> int:
        if self.kind is ScalarKind.UNSUPPORTED:
            return 0
        return self.value & UINT32_MAX


def parse_decimal(digits: str, max_value: int = UINT32_MAX) -> int:
    """Value of an ASCII digit run, saturated to max_value"""
    significant = digits.lstrip("0")
    # longer runs are out of range anyway and int() refuses very long strings
    if len(significant) > len(str(max_value)):
        return max_value
    return min(int(significant or "0"), max_value)


def to_uint32(value: Any) -> int:
    if isinstance(value, Scalar):
        return value.to_uint32()
    return Scalar.of(value).to_uint32()


def _statement_key(key: Any) -> Optional[int]:
    # JSON objects can only have string keys, so a Map(UInt32, ...) arrives as {"12": [...]}
    if isinstance(key, str) and key.isascii() and key.isdigit():
        return parse_decimal(key)
    scalar = Scalar.of(key)
    if scalar.kind is ScalarKind.UNSUPPORTED:
        return None
    return scalar.to_uint32()


def coerce_statement_map(native: Optional[Mapping[Any, Sequence[Any]]]) -> StatementMap:
    result = {}  # type: Dict[int, StatementInfo]
    if not native:
        return result
    for key, stmt in native.items():
        uint_key = _statement_key(key)
        if uint_key is None:
            logger.debug("Statement with unsupported key [%r] is skipped", key)
            continue
        if isinstance(stmt, (str, bytes)) or not isinstance(stmt, Sequence):
            logger.debug("Statement [%s] is not a sequence, skipped", uint_key)
            continue
        if len(stmt) < 4:
            logger.debug("Statement [%s] has %s fields, skipped", uint_key, len(stmt))
            continue
        result[uint_key] = StatementInfo(
            line=to_uint32(stmt[0]),
            column=to_uint32(stmt[1]),
            length=to_uint32(stmt[2]),
            count=to_uint32(stmt[3]),
        )
    return result
