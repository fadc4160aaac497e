import datetime
from typing import Any, Mapping, Optional, Sequence, Union

from .decoders import (
    decode_branch_map,
    decode_function_map,
    decode_statement_map,
)
from .records import CoverageRecord, RawCoverageRow, StatementMap
from .scalars import coerce_statement_map


def _statement_map(
    statement_map: Union[Mapping[Any, Sequence[Any]], str, None], strict: bool
) -> StatementMap:
    if isinstance(statement_map, str):
        return decode_statement_map(statement_map, strict=strict)
    return coerce_statement_map(statement_map)


def assemble_record(
    hash: str,
    timestamp: datetime.datetime,
    statement_map: Union[Mapping[Any, Sequence[Any]], str, None],
    fn_map: Optional[str] = "",
    branch_map: Optional[str] = "",
    restore_statement_map: Optional[str] = "",
    restore_fn_map: Optional[str] = "",
    restore_branch_map: Optional[str] = "",
    strict: bool = False,
) -> CoverageRecord:
    """
    Builds a record out of the raw row fields. The statement map is either the
    native column value (key -> [line, column, length, count]) or its text form,
    all the other maps are text. Maps are decoded independently of each other.
    """
    return CoverageRecord(
        hash=hash,
        statement_map=_statement_map(statement_map, strict),
        fn_map=decode_function_map(fn_map, strict=strict),
        branch_map=decode_branch_map(branch_map, strict=strict),
        restore_statement_map=decode_statement_map(restore_statement_map, strict=strict),
        restore_fn_map=decode_function_map(restore_fn_map, strict=strict),
        restore_branch_map=decode_branch_map(restore_branch_map, strict=strict),
        timestamp=timestamp,
    )


def assemble_row(row: RawCoverageRow, strict: bool = False) -> CoverageRecord:
    return assemble_record(
        hash=row.hash,
        timestamp=row.timestamp,
        statement_map=row.statement_map,
        fn_map=row.fn_map,
        branch_map=row.branch_map,
        restore_statement_map=row.restore_statement_map,
        restore_fn_map=row.restore_fn_map,
        restore_branch_map=row.restore_branch_map,
        strict=strict,
    )
