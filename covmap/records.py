import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence, Tuple, Union

Position = Tuple[int, int, int, int]


@dataclass(frozen=True)
class StatementInfo:
    line: int
    column: int
    length: int
    count: int


@dataclass(frozen=True)
class FunctionInfo:
    name: str
    line: int
    start_pos: Position
    end_pos: Position


@dataclass(frozen=True)
class BranchInfo:
    # branch kind as emitted by the instrumentation, not checked against a list
    type: int
    line: int
    position: Position
    # index in the tuple is the index of the alternative
    paths: Tuple[Position, ...] = ()


# ClickHouse DateTime values are read as naive datetimes, so is the default
EPOCH = datetime.datetime(1970, 1, 1)

StatementMap = Dict[int, StatementInfo]
FunctionMap = Dict[int, FunctionInfo]
BranchMap = Dict[int, BranchInfo]


@dataclass(frozen=True)
class CoverageRecord:
    """
    One row of the coverage_map table with every map decoded.

    restore_* maps are an earlier snapshot of the same kinds of maps. Their keys
    are independent of the primary maps.
    """

    hash: str
    statement_map: StatementMap = field(default_factory=dict)
    fn_map: FunctionMap = field(default_factory=dict)
    branch_map: BranchMap = field(default_factory=dict)
    restore_statement_map: StatementMap = field(default_factory=dict)
    restore_fn_map: FunctionMap = field(default_factory=dict)
    restore_branch_map: BranchMap = field(default_factory=dict)
    timestamp: datetime.datetime = EPOCH

    MAP_NAMES = (
        "statement_map",
        "fn_map",
        "branch_map",
        "restore_statement_map",
        "restore_fn_map",
        "restore_branch_map",
    )

    def counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in self.MAP_NAMES}

    @property
    def total_mappings(self) -> int:
        return sum(self.counts().values())


@dataclass(frozen=True)
class RawCoverageRow:
    """Raw fields of one coverage_map row as returned by a record source"""

    hash: str
    # native mapping key -> [line, column, length, count] or its text form
    statement_map: Union[Mapping[Any, Sequence[Any]], str]
    fn_map: str = ""
    branch_map: str = ""
    restore_statement_map: str = ""
    restore_fn_map: str = ""
    restore_branch_map: str = ""
    timestamp: datetime.datetime = EPOCH
