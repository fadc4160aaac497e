#!/usr/bin/env python

import datetime
import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

from covmap.__main__ import main
from covmap.clickhouse_helper import CHException
from covmap.records import RawCoverageRow


class TestMain(unittest.TestCase):
    def setUp(self):
        with tempfile.NamedTemporaryFile("w", suffix=".txt", delete=False) as f:
            f.write("{2:(1,20,(20,4,20,30),[(20,4,20,10),(20,13,20,30)])}")
            self.branch_file = f.name
        self.addCleanup(os.remove, self.branch_file)

    def _run(self, *argv):
        output = io.StringIO()
        with redirect_stdout(output):
            code = main(list(argv))
        return code, output.getvalue()

    def test_decode(self):
        code, output = self._run("decode", "branch", self.branch_file)
        self.assertEqual(code, 0)
        self.assertEqual(
            json.loads(output),
            {
                "2": {
                    "type": 1,
                    "line": 20,
                    "position": [20, 4, 20, 30],
                    "paths": [[20, 4, 20, 10], [20, 13, 20, 30]],
                }
            },
        )

    def test_decode_strict(self):
        with open(self.branch_file, "w", encoding="utf-8") as f:
            f.write("{1:(1,2,3),2:(5,6,7,8)}")
        code, output = self._run("decode", "statement", self.branch_file)
        self.assertEqual(code, 0)
        self.assertEqual(list(json.loads(output)), ["2"])
        code, output = self._run("decode", "statement", self.branch_file, "--strict")
        self.assertEqual(code, 1)
        self.assertEqual(output, "")

    @patch("covmap.__main__.CoverageMapSource.fetch_one")
    def test_show(self, fetch_mock):
        fetch_mock.return_value = RawCoverageRow(
            hash="abc123",
            statement_map={"0": [1, 2, 3, 4]},
            fn_map="{}",
            branch_map="{}",
            restore_statement_map="{}",
            restore_fn_map="{}",
            restore_branch_map="{}",
            timestamp=datetime.datetime(2024, 5, 1, 10, 30, 15),
        )
        code, output = self._run("show", "--hash", "abc123")
        self.assertEqual(code, 0)
        fetch_mock.assert_called_once_with("abc123", statement_text=False)
        self.assertIn("Hash: abc123", output)
        self.assertIn("Total mappings: 1", output)
        self.assertIn("Key: 0 -> Line: 1, Column: 2, Length: 3, Count: 4", output)

    @patch("covmap.__main__.CoverageMapSource.fetch_one")
    def test_show_no_row(self, fetch_mock):
        fetch_mock.return_value = None
        code, output = self._run("show")
        self.assertEqual(code, 1)
        self.assertEqual(output, "")

    @patch("covmap.__main__.CoverageMapSource.fetch_one")
    def test_show_failure(self, fetch_mock):
        fetch_mock.side_effect = CHException("Cannot fetch data from clickhouse")
        code, _ = self._run("show", "--statement-text")
        self.assertEqual(code, 1)
        fetch_mock.assert_called_once_with(None, statement_text=True)

    @patch("covmap.__main__.CoverageMapSource.ping")
    def test_ping(self, ping_mock):
        ping_mock.return_value = True
        self.assertEqual(self._run("ping")[0], 0)
        ping_mock.return_value = False
        self.assertEqual(self._run("ping")[0], 1)

    def test_no_command(self):
        code, output = self._run()
        self.assertEqual(code, 1)
        self.assertIn("usage: covmap", output)
