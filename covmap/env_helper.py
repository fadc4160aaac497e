import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional


def get_env(key: str, default: str, environ: Optional[Mapping[str, str]] = None) -> str:
    # empty value is the same as unset
    if environ is None:
        environ = os.environ
    return environ.get(key) or default


@dataclass(frozen=True)
class ClickHouseConfig:
    host: str = "localhost"
    port: str = "8123"
    database: str = "default"
    username: str = "default"
    password: str = "123456"
    table: str = "coverage_map"
    secure: bool = False
    timeout: float = 100

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClickHouseConfig":
        return cls(
            host=get_env("CLICKHOUSE_HOST", cls.host, environ),
            port=get_env("CLICKHOUSE_PORT", cls.port, environ),
            database=get_env("CLICKHOUSE_DATABASE", cls.database, environ),
            username=get_env("CLICKHOUSE_USERNAME", cls.username, environ),
            password=get_env("CLICKHOUSE_PASSWORD", cls.password, environ),
            table=get_env("CLICKHOUSE_TABLE", cls.table, environ),
            secure=bool(get_env("CLICKHOUSE_SECURE", "", environ)),
            timeout=float(get_env("CLICKHOUSE_TIMEOUT", str(cls.timeout), environ)),
        )

    @property
    def url(self) -> str:
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.host}:{self.port}"

    @property
    def auth(self) -> Dict[str, str]:
        return {
            "X-ClickHouse-User": self.username,
            "X-ClickHouse-Key": self.password,
        }
