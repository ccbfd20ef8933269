import re
from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class LogLinePrefix:
    timestamp: datetime
    client_addr: str | None
    user_name: str | None
    database_name: str | None
    process_id: int | None
    log_level: str


@dataclass(frozen=True, slots=True)
class ParsedStatement:
    """A statement logged by ``log_min_duration_statement``."""

    statement: str
    duration_ms: float
    timestamp: datetime
    user_name: str | None = None
    database_name: str | None = None
    process_id: int | None = None


class PostgresLogLineParser:
    """Parser for PostgreSQL log lines carrying statement durations.

    Expects ``log_line_prefix = '%m:%r:%u@%d:[%p]: '`` (``%t`` works too).
    """

    LOG_LINE_PATTERN = re.compile(
        r"^(?P<ts>\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}(?:\.\d+)?)\s+(?P<tz>\w+)"
        r":(?P<client>[^:]*):"
        r"(?P<conn>[^:]*)"
        r":\[(?P<pid>\d+)\]:\s*"
        r"(?P<level>\w+):\s*"
        r"(?P<message>.*)$"
    )

    DURATION_PATTERN = re.compile(
        r"^duration:\s*(?P<duration>\d+(?:\.\d+)?)\s*ms\s+"
        r"(?:statement|execute\s+[^:]*):\s*(?P<statement>.+)$",
        re.DOTALL,
    )

    USER_DB_PATTERN = re.compile(r"^(?P<user>[^@]+)(?:@(?P<db>.+))?$")

    def parse_line(self, line: str) -> ParsedStatement | None:
        """Parse a PostgreSQL log line. Returns None if it carries no timed statement."""
        line = line.strip()
        if not line:
            return None

        match = self.LOG_LINE_PATTERN.match(line)
        if not match:
            return None

        statement = self.DURATION_PATTERN.match(match.group("message"))
        if not statement:
            return None

        prefix = self._parse_prefix(match)
        return ParsedStatement(
            statement=statement.group("statement").strip(),
            duration_ms=float(statement.group("duration")),
            timestamp=prefix.timestamp,
            user_name=prefix.user_name,
            database_name=prefix.database_name,
            process_id=prefix.process_id,
        )

    def _parse_prefix(self, match: re.Match[str]) -> LogLinePrefix:
        timestamp = self._parse_timestamp(match.group("ts"), match.group("tz"))
        client = match.group("client").strip() or None
        user_name, database_name = self._parse_user_db(match.group("conn").strip())

        pid_str = match.group("pid")
        return LogLinePrefix(
            timestamp=timestamp,
            client_addr=client,
            user_name=user_name,
            database_name=database_name,
            process_id=int(pid_str) if pid_str else None,
            log_level=match.group("level"),
        )

    def _parse_timestamp(self, ts_str: str, tz_str: str) -> datetime:
        fmt = "%Y-%m-%d %H:%M:%S.%f" if "." in ts_str else "%Y-%m-%d %H:%M:%S"
        dt = datetime.strptime(ts_str, fmt)
        if tz_str.upper() == "UTC":
            dt = dt.replace(tzinfo=UTC)
        return dt

    def _parse_user_db(self, conn: str) -> tuple[str | None, str | None]:
        if not conn:
            return None, None
        match = self.USER_DB_PATTERN.match(conn)
        if not match:
            return None, None
        return match.group("user") or None, match.group("db") or None
