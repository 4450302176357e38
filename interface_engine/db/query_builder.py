# File: /interface_engine/db/query_builder.py | Version: 1.0 | Title: Query-builder protocol + SQLAlchemy implementation over table_rows
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from sqlalchemy import and_, false, func, not_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interface_engine.core.cancellation import CancelToken, QueryCancelledError
from interface_engine.models.tables import TableRow

log = logging.getLogger(__name__)

# Postgres "undefined_table" and the REST gateway's "relation not found"
MISSING_RELATION_CODES = frozenset({"42P01", "PGRST205"})


@dataclass(frozen=True)
class QueryError:
    code: str
    message: str


@dataclass(frozen=True)
class QueryResult:
    data: Any
    error: Optional[QueryError] = None
    count: Optional[int] = None


def is_missing_relation(error: Optional[QueryError]) -> bool:
    return error is not None and error.code in MISSING_RELATION_CODES


class QueryFailedError(RuntimeError):
    """Raised by callers that cannot continue after a QueryError."""

    def __init__(self, error: QueryError):
        super().__init__(f"{error.code}: {error.message}")
        self.error = error


class QueryBuilder(Protocol):
    """The subset of a REST-style query builder the filter engine targets."""

    def select(self, columns: str = "*", count: Optional[str] = None) -> "QueryBuilder": ...
    def eq(self, field: str, value: Any) -> "QueryBuilder": ...
    def neq(self, field: str, value: Any) -> "QueryBuilder": ...
    def gt(self, field: str, value: Any) -> "QueryBuilder": ...
    def gte(self, field: str, value: Any) -> "QueryBuilder": ...
    def lt(self, field: str, value: Any) -> "QueryBuilder": ...
    def lte(self, field: str, value: Any) -> "QueryBuilder": ...
    def ilike(self, field: str, pattern: str) -> "QueryBuilder": ...
    def in_(self, field: str, values: Sequence[Any]) -> "QueryBuilder": ...
    def contains(self, field: str, values: Sequence[Any]) -> "QueryBuilder": ...
    def is_(self, field: str, value: None) -> "QueryBuilder": ...
    def not_(self, field: str, op: str, value: Any) -> "QueryBuilder": ...
    def or_(self, expr: str) -> "QueryBuilder": ...
    def order(self, field: str, ascending: bool = True) -> "QueryBuilder": ...
    def range(self, start: int, end: int) -> "QueryBuilder": ...
    def limit(self, n: int) -> "QueryBuilder": ...
    def execute(self, token: Optional[CancelToken] = None) -> QueryResult: ...


# ----------------------------
# Logic-string grammar (or=(a.eq.1,and(b.gt.2,c.is.null)))
# ----------------------------
class LogicSyntaxError(ValueError):
    pass


_RESERVED = set(',.:()"\\{} ')
_INT_RE = re.compile(r"^-?\d+$")
_FLOAT_RE = re.compile(r"^-?\d+\.\d+$")

LogicNode = Tuple[Any, ...]


def _literal(raw: str) -> Any:
    if raw == "null":
        return None
    if raw == "true":
        return True
    if raw == "false":
        return False
    if _INT_RE.match(raw):
        return int(raw)
    if _FLOAT_RE.match(raw):
        return float(raw)
    return raw


def quote_token(value: str) -> str:
    if value == "" or any(ch in _RESERVED for ch in value) or _literal(value) != value:
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return value


def render_literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return quote_token(str(value))


class _LogicParser:
    def __init__(self, text: str):
        self.s = text
        self.pos = 0

    def _peek(self) -> str:
        return self.s[self.pos] if self.pos < len(self.s) else ""

    def _expect(self, ch: str) -> None:
        if self._peek() != ch:
            raise LogicSyntaxError(f"Expected {ch!r} at {self.pos} in {self.s!r}")
        self.pos += 1

    def parse(self) -> List[LogicNode]:
        nodes = self._parse_list()
        if self.pos != len(self.s):
            raise LogicSyntaxError(f"Unexpected {self._peek()!r} at {self.pos} in {self.s!r}")
        return nodes

    def _parse_list(self) -> List[LogicNode]:
        items = [self._parse_item()]
        while self._peek() == ",":
            self.pos += 1
            items.append(self._parse_item())
        return items

    def _parse_item(self) -> LogicNode:
        for kw in ("and(", "or("):
            if self.s.startswith(kw, self.pos):
                self.pos += len(kw)
                children = self._parse_list()
                self._expect(")")
                return (kw[:-1], children)

        field = self._read_segment()
        self._expect(".")
        op = self._read_segment()
        self._expect(".")
        negate = False
        if op == "not":
            negate = True
            op = self._read_segment()
            self._expect(".")
        return ("pred", field, op, negate, self._read_value())

    def _read_quoted(self) -> str:
        self._expect('"')
        buf: List[str] = []
        while self.pos < len(self.s):
            ch = self.s[self.pos]
            if ch == "\\" and self.pos + 1 < len(self.s):
                buf.append(self.s[self.pos + 1])
                self.pos += 2
                continue
            if ch == '"':
                self.pos += 1
                return "".join(buf)
            buf.append(ch)
            self.pos += 1
        raise LogicSyntaxError(f"Unterminated quote in {self.s!r}")

    def _read_raw(self, stops: str) -> str:
        start = self.pos
        while self.pos < len(self.s) and self.s[self.pos] not in stops:
            self.pos += 1
        return self.s[start:self.pos]

    def _read_segment(self) -> str:
        if self._peek() == '"':
            return self._read_quoted()
        return self._read_raw(".,()")

    def _read_scalar(self, stops: str) -> Any:
        if self._peek() == '"':
            return self._read_quoted()
        return _literal(self._read_raw(stops))

    def _read_value(self) -> Any:
        ch = self._peek()
        if ch in ("(", "{"):
            close = ")" if ch == "(" else "}"
            self.pos += 1
            values: List[Any] = []
            while self._peek() != close:
                if not self._peek():
                    raise LogicSyntaxError(f"Unterminated list in {self.s!r}")
                values.append(self._read_scalar("," + close))
                if self._peek() == ",":
                    self.pos += 1
            self.pos += 1
            return values
        return self._read_scalar(",)")


def parse_logic(expr: str) -> List[LogicNode]:
    return _LogicParser(expr).parse()


# ----------------------------
# SQLAlchemy-backed builder over JSON row storage
# ----------------------------
_ROW_COLUMNS = {"id", "created_at"}


def _to_query_error(exc: SQLAlchemyError) -> QueryError:
    orig = getattr(exc, "orig", None)
    msg = str(orig or exc)
    code = getattr(orig, "pgcode", None)
    if not code:
        lowered = msg.lower()
        code = "42P01" if ("no such table" in lowered or "does not exist" in lowered) else "XX000"
    return QueryError(code=code, message=msg)


class RowQuery:
    """
    Implements QueryBuilder over `table_rows.data` (JSON). Predicates pick the
    JSON accessor from the Python type of the compared value, so callers pass
    numbers for numeric fields and strings (ISO dates included) otherwise.
    """

    def __init__(self, db: Session, table_id: str):
        self._db = db
        self._table_id = table_id
        self._mode = "select"
        self._columns = "*"
        self._count: Optional[str] = None
        self._where: List[Any] = []
        self._order: List[Any] = []
        self._offset: Optional[int] = None
        self._limit: Optional[int] = None
        self._payload: Any = None
        self._single = False

    # --- expression helpers ---
    def _text(self, field: str):
        if field in _ROW_COLUMNS:
            return getattr(TableRow, field)
        return TableRow.data[field].as_string()

    def _typed(self, field: str, value: Any):
        if field in _ROW_COLUMNS:
            return getattr(TableRow, field)
        node = TableRow.data[field]
        if isinstance(value, bool):
            return node.as_boolean()
        if isinstance(value, (int, float)):
            return node.as_float()
        return node.as_string()

    def _predicate(self, field: str, op: str, value: Any):
        if op == "is" or (op == "eq" and value is None):
            return self._text(field).is_(None)
        if op == "eq":
            if isinstance(value, list):
                return self._text(field) == json.dumps(value, separators=(",", ":"))
            return self._typed(field, value) == value
        if op == "neq":
            return self._negate(field, "eq", value)
        if op in ("gt", "gte", "lt", "lte"):
            col = self._typed(field, value)
            return {
                "gt": col > value,
                "gte": col >= value,
                "lt": col < value,
                "lte": col <= value,
            }[op]
        if op == "ilike":
            return self._text(field).ilike(str(value))
        if op == "in":
            values = list(value or [])
            if not values:
                return false()
            return or_(*[self._predicate(field, "eq", v) for v in values])
        if op == "cs":
            values = value if isinstance(value, list) else [value]
            return and_(
                *[self._text(field).contains(json.dumps(str(v)), autoescape=True) for v in values]
            )
        raise LogicSyntaxError(f"Unsupported operator {op!r}")

    def _negate(self, field: str, op: str, value: Any):
        if op == "is":
            return self._text(field).is_not(None)
        # Negations keep rows where the field is unset
        return or_(self._text(field).is_(None), not_(self._predicate(field, op, value)))

    def _build_logic(self, node: LogicNode):
        kind = node[0]
        if kind == "pred":
            _, field, op, negate, value = node
            return self._negate(field, op, value) if negate else self._predicate(field, op, value)
        built = [self._build_logic(c) for c in node[1]]
        return or_(*built) if kind == "or" else and_(*built)

    # --- filter surface ---
    def filter(self, field: str, op: str, value: Any) -> "RowQuery":
        self._where.append(self._predicate(field, op, value))
        return self

    def eq(self, field: str, value: Any) -> "RowQuery":
        return self.filter(field, "eq", value)

    def neq(self, field: str, value: Any) -> "RowQuery":
        return self.filter(field, "neq", value)

    def gt(self, field: str, value: Any) -> "RowQuery":
        return self.filter(field, "gt", value)

    def gte(self, field: str, value: Any) -> "RowQuery":
        return self.filter(field, "gte", value)

    def lt(self, field: str, value: Any) -> "RowQuery":
        return self.filter(field, "lt", value)

    def lte(self, field: str, value: Any) -> "RowQuery":
        return self.filter(field, "lte", value)

    def ilike(self, field: str, pattern: str) -> "RowQuery":
        return self.filter(field, "ilike", pattern)

    def in_(self, field: str, values: Sequence[Any]) -> "RowQuery":
        return self.filter(field, "in", list(values))

    def contains(self, field: str, values: Sequence[Any]) -> "RowQuery":
        return self.filter(field, "cs", list(values))

    def is_(self, field: str, value: None = None) -> "RowQuery":
        return self.filter(field, "is", None)

    def not_(self, field: str, op: str, value: Any) -> "RowQuery":
        self._where.append(self._negate(field, op, value))
        return self

    def or_(self, expr: str) -> "RowQuery":
        nodes = parse_logic(expr)
        self._where.append(or_(*[self._build_logic(n) for n in nodes]))
        return self

    # --- shaping ---
    def select(self, columns: str = "*", count: Optional[str] = None) -> "RowQuery":
        self._columns = columns or "*"
        self._count = count
        return self

    def order(self, field: str, ascending: bool = True) -> "RowQuery":
        col = self._text(field)
        self._order.append(col.asc() if ascending else col.desc())
        return self

    def range(self, start: int, end: int) -> "RowQuery":
        self._offset = max(0, start)
        self._limit = max(0, end - start + 1)
        return self

    def limit(self, n: int) -> "RowQuery":
        self._limit = n
        return self

    def single(self) -> "RowQuery":
        self._single = True
        return self

    # --- mutations ---
    def insert(self, rows: Union[Dict[str, Any], Iterable[Dict[str, Any]]]) -> "RowQuery":
        self._mode = "insert"
        self._payload = [rows] if isinstance(rows, dict) else list(rows)
        return self

    def update(self, values: Dict[str, Any]) -> "RowQuery":
        self._mode = "update"
        self._payload = dict(values)
        return self

    def delete(self) -> "RowQuery":
        self._mode = "delete"
        return self

    # --- execution ---
    def _project(self, row: TableRow) -> Dict[str, Any]:
        out = {"id": row.id, **(row.data or {})}
        if self._columns.strip() == "*":
            return out
        wanted = {c.strip() for c in self._columns.split(",") if c.strip()} | {"id"}
        return {k: v for k, v in out.items() if k in wanted}

    def _matching(self):
        return select(TableRow).where(TableRow.table_id == self._table_id, *self._where)

    def _run(self) -> Tuple[Any, Optional[int]]:
        count = None
        if self._mode == "insert":
            objs = [TableRow(table_id=self._table_id, data=dict(r)) for r in self._payload]
            self._db.add_all(objs)
            self._db.commit()
            for o in objs:
                self._db.refresh(o)
            return [self._project(o) for o in objs], None

        if self._mode in ("update", "delete"):
            rows = list(self._db.execute(self._matching()).scalars().all())
            for r in rows:
                if self._mode == "update":
                    r.data = {**(r.data or {}), **self._payload}
                else:
                    self._db.delete(r)
            self._db.commit()
            return [self._project(r) for r in rows], None

        stmt = self._matching()
        if self._count:
            count = self._db.scalar(select(func.count()).select_from(stmt.subquery()))
        stmt = stmt.order_by(*self._order, TableRow.created_at.asc(), TableRow.id.asc())
        if self._offset:
            stmt = stmt.offset(self._offset)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        rows = self._db.execute(stmt).scalars().all()
        return [self._project(r) for r in rows], count

    def execute(self, token: Optional[CancelToken] = None) -> QueryResult:
        if token is not None:
            token.check()
        try:
            data, count = self._run()
        except SQLAlchemyError as exc:
            self._db.rollback()
            error = _to_query_error(exc)
            log.warning(
                "Row query on table %s failed: %s %s",
                self._table_id,
                error.code,
                error.message,
                extra={"table_id": self._table_id, "query_code": error.code},
            )
            return QueryResult(data=None, error=error)

        if token is not None and token.cancelled:
            raise QueryCancelledError(token.reason or "cancelled")

        if self._single:
            if not data:
                return QueryResult(data=None, error=QueryError("PGRST116", "No rows returned"))
            return QueryResult(data=data[0], count=count)
        return QueryResult(data=data, count=count)
