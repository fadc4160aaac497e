from typing import Iterable, List, Mapping, Tuple, TypeVar

from .records import CoverageRecord, Position

V = TypeVar("V")

TS_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_PATHS = 3

_TITLES = {
    "statement_map": "Statement mappings",
    "fn_map": "Function mappings",
    "branch_map": "Branch mappings",
    "restore_statement_map": "Restore statement mappings",
    "restore_fn_map": "Restore function mappings",
    "restore_branch_map": "Restore branch mappings",
}


def _span(pos: Position) -> str:
    return f"({pos[0]},{pos[1]})-({pos[2]},{pos[3]})"


def _head(mapping: Mapping[int, V], limit: int) -> Iterable[Tuple[int, V]]:
    for key in sorted(mapping)[:limit]:
        yield key, mapping[key]


def _tail(lines: List[str], total: int, limit: int, what: str) -> None:
    if total > limit:
        lines.append(f"    ... {total - limit} more {what}")


def summary_lines(record: CoverageRecord) -> List[str]:
    lines = [
        f"Hash: {record.hash}",
        f"Time: {record.timestamp.strftime(TS_FORMAT)}",
    ]
    for name, count in record.counts().items():
        lines.append(f"{_TITLES[name]}: {count}")
    lines.append(f"Total mappings: {record.total_mappings}")
    return lines


def statement_lines(record: CoverageRecord, limit: int) -> List[str]:
    lines = ["Statement map:"]
    if not record.statement_map:
        return lines + ["  no statement mappings"]
    lines.append(f"  first {limit} statement mappings:")
    for key, stmt in _head(record.statement_map, limit):
        lines.append(
            f"    Key: {key} -> Line: {stmt.line}, Column: {stmt.column}, "
            f"Length: {stmt.length}, Count: {stmt.count}"
        )
    _tail(lines, len(record.statement_map), limit, "statement mappings")
    return lines


def function_lines(record: CoverageRecord, limit: int) -> List[str]:
    lines = ["Function map:"]
    if not record.fn_map:
        return lines + ["  no function mappings"]
    lines.append(f"  first {limit} function mappings:")
    for key, fn in _head(record.fn_map, limit):
        lines.append(f"    Key: {key} -> Name: {fn.name}, Line: {fn.line}")
        lines.append(f"      Start: {_span(fn.start_pos)}, End: {_span(fn.end_pos)}")
    _tail(lines, len(record.fn_map), limit, "function mappings")
    return lines


def branch_lines(record: CoverageRecord, limit: int) -> List[str]:
    lines = ["Branch map:"]
    if not record.branch_map:
        return lines + ["  no branch mappings"]
    lines.append(f"  first {limit} branch mappings:")
    for key, branch in _head(record.branch_map, limit):
        lines.append(
            f"    Key: {key} -> Type: {branch.type}, Line: {branch.line}, "
            f"Position: {_span(branch.position)}, Paths: {len(branch.paths)}"
        )
        for i, path in enumerate(branch.paths[:MAX_PATHS]):
            lines.append(f"      Path {i}: {_span(path)}")
        if len(branch.paths) > MAX_PATHS:
            lines.append(f"      ... {len(branch.paths) - MAX_PATHS} more paths")
    _tail(lines, len(record.branch_map), limit, "branch mappings")
    return lines


def example_lines(record: CoverageRecord) -> List[str]:
    lines = ["Examples:"]
    if record.statement_map:
        key = min(record.statement_map)
        stmt = record.statement_map[key]
        lines.append(
            f"First statement (Key: {key}): line {stmt.line}, column {stmt.column}, "
            f"length {stmt.length}, count {stmt.count}"
        )
    if record.fn_map:
        key = min(record.fn_map)
        fn = record.fn_map[key]
        lines.append(f"First function (Key: {key}): {fn.name}, line {fn.line}")
    if record.branch_map:
        key = min(record.branch_map)
        branch = record.branch_map[key]
        lines.append(
            f"First branch (Key: {key}): type {branch.type}, line {branch.line}, "
            f"paths {len(branch.paths)}"
        )
    return lines


def format_record(record: CoverageRecord, limit: int = 5) -> str:
    sections = [
        summary_lines(record),
        statement_lines(record, limit),
        function_lines(record, limit),
        branch_lines(record, limit),
        example_lines(record),
    ]
    return "\n\n".join("\n".join(section) for section in sections)
