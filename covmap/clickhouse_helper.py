import datetime
import json
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from .env_helper import ClickHouseConfig
from .records import RawCoverageRow

logger = logging.getLogger(__name__)


class CHException(Exception):
    pass


class CoverageMapSource:
    """Reads raw coverage_map rows over the ClickHouse HTTP interface"""

    RETRIES = 5
    MAX_EXECUTION_TIME = 60

    # the native statement_map is kept as is, the other maps are fetched in their text form
    QUERY_TEMPLATE = """
SELECT
    hash,
    {statement_map} AS statement_map,
    toString(fn_map) AS fn_map_str,
    toString(branch_map) AS branch_map_str,
    toString(restore_statement_map) AS restore_statement_map_str,
    toString(restore_fn_map) AS restore_fn_map_str,
    toString(restore_branch_map) AS restore_branch_map_str,
    ts
FROM {table}
{where}LIMIT {limit}
"""

    def __init__(
        self,
        config: Optional[ClickHouseConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or ClickHouseConfig.from_env()
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "CoverageMapSource":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def query(
        self,
        hash_value: Optional[str] = None,
        limit: int = 1,
        statement_text: bool = False,
    ) -> str:
        return self.QUERY_TEMPLATE.format(
            statement_map=(
                "toString(statement_map)" if statement_text else "statement_map"
            ),
            table=self.config.table,
            where="WHERE hash = {hash:String}\n" if hash_value is not None else "",
            limit=int(limit),
        )

    def _get(self, params: Dict[str, str]) -> str:
        response = None
        for i in range(self.RETRIES):
            try:
                response = self.session.get(
                    self.config.url,
                    params=params,
                    headers=self.config.auth,
                    timeout=self.config.timeout,
                )
                response.raise_for_status()
                return response.text
            except requests.RequestException as ex:
                logger.warning("Select query failed with exception %s", str(ex))
                if response is not None:
                    logger.warning("Response text %s", response.text)
                response = None
                time.sleep(0.1 * i)

        raise CHException(f"Cannot fetch data from clickhouse at {self.config.url}")

    def select_json_each_row(
        self, query: str, query_params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        params = {
            "database": self.config.database,
            "query": query,
            "default_format": "JSONEachRow",
            # UInt64 values are quoted by default, the statement map needs plain numbers
            "output_format_json_quote_64bit_integers": "0",
            "max_execution_time": str(self.MAX_EXECUTION_TIME),
        }
        if query_params is not None:
            for name, value in query_params.items():
                params[f"param_{name}"] = str(value)

        text = self._get(params)
        result = []
        for line in text.split("\n"):
            if line:
                try:
                    result.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise CHException(f"Malformed JSONEachRow line: {e}") from e
        return result

    def fetch_rows(
        self,
        hash_value: Optional[str] = None,
        limit: int = 1,
        statement_text: bool = False,
    ) -> List[RawCoverageRow]:
        query_params = {"hash": hash_value} if hash_value is not None else None
        rows = self.select_json_each_row(
            self.query(hash_value, limit, statement_text), query_params
        )
        logger.info("Fetched %s row(s) from %s", len(rows), self.config.table)
        return [self.to_raw_row(row) for row in rows]

    def fetch_one(
        self, hash_value: Optional[str] = None, statement_text: bool = False
    ) -> Optional[RawCoverageRow]:
        rows = self.fetch_rows(hash_value, 1, statement_text)
        return rows[0] if rows else None

    def ping(self) -> bool:
        try:
            return self.select_json_each_row("SELECT 1 AS ok") == [{"ok": 1}]
        except CHException as e:
            logger.error("Connection to ClickHouse failed: %s", e)
            return False

    @staticmethod
    def parse_ts(value: Any) -> datetime.datetime:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            # naive like the text form, in UTC
            return datetime.datetime.fromtimestamp(value, datetime.timezone.utc).replace(
                tzinfo=None
            )
        if not isinstance(value, str):
            raise CHException(f"Unsupported ts value [{value!r}]")
        # DateTime64 has a fraction of arbitrary precision, fromisoformat takes up to 6 digits
        head, _, fraction = value.partition(".")
        if fraction:
            head = f"{head}.{fraction[:6].ljust(6, '0')}"
        try:
            return datetime.datetime.fromisoformat(head)
        except ValueError as e:
            raise CHException(f"Cannot parse ts [{value}]") from e

    @classmethod
    def to_raw_row(cls, row: Dict[str, Any]) -> RawCoverageRow:
        try:
            return RawCoverageRow(
                hash=row["hash"],
                statement_map=row["statement_map"],
                fn_map=row["fn_map_str"],
                branch_map=row["branch_map_str"],
                restore_statement_map=row["restore_statement_map_str"],
                restore_fn_map=row["restore_fn_map_str"],
                restore_branch_map=row["restore_branch_map_str"],
                timestamp=cls.parse_ts(row["ts"]),
            )
        except KeyError as e:
            raise CHException(f"Column {e} is missing in the result") from e
