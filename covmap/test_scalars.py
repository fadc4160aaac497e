#!/usr/bin/env python

import unittest
from dataclasses import dataclass
from typing import Any

from covmap.records import StatementInfo
from covmap.scalars import (
    Scalar,
    ScalarKind,
    coerce_statement_map,
    parse_decimal,
    to_uint32,
)


class TestScalar(unittest.TestCase):
    def test_classification(self):
        @dataclass
        class TestCase:
            value: Any
            kind: ScalarKind

        cases = (
            TestCase(0, ScalarKind.UINT32),
            TestCase(4294967295, ScalarKind.UINT32),
            TestCase(4294967296, ScalarKind.UINT64),
            TestCase(2**64 - 1, ScalarKind.UINT64),
            TestCase(-1, ScalarKind.INT32),
            TestCase(-(2**31), ScalarKind.INT32),
            TestCase(-(2**31) - 1, ScalarKind.INT64),
            TestCase(-(2**63), ScalarKind.INT64),
            TestCase(2**64, ScalarKind.INT),
            TestCase(-(2**63) - 1, ScalarKind.INT),
            TestCase("12", ScalarKind.UNSUPPORTED),
            TestCase(1.0, ScalarKind.UNSUPPORTED),
            TestCase(None, ScalarKind.UNSUPPORTED),
            TestCase(True, ScalarKind.UNSUPPORTED),
        )
        for tc in cases:
            self.assertEqual(Scalar.of(tc.value).kind, tc.kind, repr(tc.value))

    def test_every_width_keeps_value(self):
        for kind in ScalarKind:
            if kind is ScalarKind.UNSUPPORTED:
                continue
            self.assertEqual(Scalar(kind, 12345).to_uint32(), 12345, kind)
        for value in (0, 7, 4294967295):
            self.assertEqual(to_uint32(value), value)

    def test_truncation(self):
        self.assertEqual(to_uint32(-1), 4294967295)
        self.assertEqual(to_uint32(2**32 + 5), 5)
        self.assertEqual(to_uint32(Scalar(ScalarKind.INT64, -(2**32) - 2)), 4294967294)

    def test_unsupported_is_zero(self):
        for value in ("12", "text", 3.5, None, [1], True, b"1"):
            self.assertEqual(to_uint32(value), 0, repr(value))
        self.assertEqual(Scalar(ScalarKind.UNSUPPORTED, 10).to_uint32(), 0)


class TestParseDecimal(unittest.TestCase):
    def test_saturation(self):
        @dataclass
        class TestCase:
            digits: str
            max_value: int
            expected: int

        cases = (
            TestCase("0", 4294967295, 0),
            TestCase("", 4294967295, 0),
            TestCase("007", 4294967295, 7),
            TestCase("4294967295", 4294967295, 4294967295),
            TestCase("4294967296", 4294967295, 4294967295),
            TestCase("9" * 5000, 4294967295, 4294967295),
            TestCase("0" * 5000 + "12", 4294967295, 12),
            TestCase("99", 255, 99),
            TestCase("300", 255, 255),
            TestCase("1" + "0" * 5000, 255, 255),
        )
        for tc in cases:
            self.assertEqual(
                parse_decimal(tc.digits, tc.max_value),
                tc.expected,
                f"{len(tc.digits)} digits",
            )
        self.assertEqual(parse_decimal("4294967296"), 4294967295)


class TestStatementMapCoercion(unittest.TestCase):
    def test_native_map(self):
        self.assertEqual(
            coerce_statement_map({0: [1, 2, 3, 4], 7: (5, 6, 7, 8)}),
            {0: StatementInfo(1, 2, 3, 4), 7: StatementInfo(5, 6, 7, 8)},
        )

    def test_json_keys(self):
        self.assertEqual(
            coerce_statement_map({"3": [1, 2, 3, 4]}), {3: StatementInfo(1, 2, 3, 4)}
        )

    def test_json_key_overflow(self):
        # decimal text saturates like in the text form, native integers truncate
        self.assertEqual(
            coerce_statement_map({"4294967296": [1, 2, 3, 4]}),
            {4294967295: StatementInfo(1, 2, 3, 4)},
        )
        self.assertEqual(
            coerce_statement_map(
                {"9" * 5000: [1, 2, 3, 4], "0" * 5000 + "5": [5, 6, 7, 8]}
            ),
            {4294967295: StatementInfo(1, 2, 3, 4), 5: StatementInfo(5, 6, 7, 8)},
        )
        self.assertEqual(
            coerce_statement_map({4294967296: [1, 2, 3, 4]}),
            {0: StatementInfo(1, 2, 3, 4)},
        )
        self.assertEqual(coerce_statement_map({"-1": [1, 2, 3, 4], "1e3": [1]}), {})

    def test_tolerance(self):
        result = coerce_statement_map(
            {
                "x": [1, 2, 3, 4],
                1: [1, 2, 3],
                2: "1234",
                3: None,
                4: [1, "2", 3.0, -1, 99],
            }
        )
        self.assertEqual(result, {4: StatementInfo(1, 0, 0, 4294967295)})

    def test_empty(self):
        self.assertEqual(coerce_statement_map({}), {})
        self.assertEqual(coerce_statement_map(None), {})
