from .assembler import assemble_record, assemble_row
from .decoders import (
    BranchMapDecoder,
    FunctionMapDecoder,
    MapDecodeError,
    StatementMapDecoder,
    decode_branch_map,
    decode_function_map,
    decode_paths,
    decode_statement_map,
)
from .records import (
    BranchInfo,
    CoverageRecord,
    FunctionInfo,
    RawCoverageRow,
    StatementInfo,
)
from .scalars import Scalar, ScalarKind, coerce_statement_map, to_uint32

__all__ = [
    "BranchInfo",
    "BranchMapDecoder",
    "CoverageRecord",
    "FunctionInfo",
    "FunctionMapDecoder",
    "MapDecodeError",
    "RawCoverageRow",
    "Scalar",
    "ScalarKind",
    "StatementInfo",
    "StatementMapDecoder",
    "assemble_record",
    "assemble_row",
    "coerce_statement_map",
    "decode_branch_map",
    "decode_function_map",
    "decode_paths",
    "decode_statement_map",
    "to_uint32",
]
