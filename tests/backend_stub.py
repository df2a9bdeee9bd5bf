"""In-process stand-in for the hosted backend.

Serves the REST and auth endpoints the app calls through an
``httpx.MockTransport``. Rows live in an in-memory SQLite database created
from the schema models, so queries run against the same tables, columns and
foreign keys the app validates against.
"""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
import enum
import json
import operator
import uuid

import httpx
from jose import jwt
from pydantic import TypeAdapter
from sqlalchemy import create_engine, func, insert, select, update
from sqlalchemy.pool import StaticPool

from telemed.core.backend import OBJECT_MEDIA_TYPE, split_select
from telemed.core.config import settings
from telemed.core.database import Base
from telemed.schemas.tables import TABLES

OPERATORS = {
    "eq": operator.eq,
    "neq": operator.ne,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}

_datetime = TypeAdapter(datetime)
_date = TypeAdapter(date)


def make_access_token(
    user_id: str,
    email: str,
    user_metadata: Optional[Dict[str, Any]] = None,
    expires_in: int = 3600,
    secret: Optional[str] = None,
    audience: str = "authenticated",
) -> str:
    expire = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
    claims = {
        "sub": user_id,
        "email": email,
        "aud": audience,
        "role": "authenticated",
        "exp": int(expire.timestamp()),
        "user_metadata": user_metadata or {},
    }
    return jwt.encode(claims, secret or settings.BACKEND_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _python_type(column):
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def coerce(column, value: Any) -> Any:
    """Turn a query-string or JSON value into what the column type binds."""
    if value is None:
        return None
    python_type = _python_type(column)
    if isinstance(value, str):
        if value == "null":
            return None
        if python_type is bool:
            return value == "true"
        if python_type is datetime:
            return _datetime.validate_python(value)
        if python_type is date:
            return _date.validate_python(value)
        if python_type in (int, float):
            return python_type(value)
    return value


def serialize(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def error(status_code: int, code: str, message: str, **extra) -> httpx.Response:
    return httpx.Response(status_code, json={"code": code, "message": message, **extra})


class HostedBackendStub:
    def __init__(self):
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)

        self.users: Dict[str, Dict[str, Any]] = {}
        self.refresh_tokens: Dict[str, str] = {}
        self.requests: List[httpx.Request] = []
        self.failing_tables = set()
        self.confirm_email = False
        self.max_rows: Optional[int] = None
        self.transport = httpx.MockTransport(self.handle)

    def close(self):
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    # Fixture helpers
    def insert(self, table: str, **values) -> Dict[str, Any]:
        columns = TABLES[table].model.__table__.c
        values.setdefault("id", str(uuid.uuid4()))
        with self.engine.begin() as conn:
            conn.execute(insert(columns.id.table).values(
                **{name: coerce(columns[name], value) for name, value in values.items()}
            ))
            row = conn.execute(select(columns.id.table).where(columns.id == values["id"])).one()
        return {key: serialize(value) for key, value in row._mapping.items()}

    def add_user(self, email: str, password: str = "Password123", **user_metadata) -> Dict[str, Any]:
        """Register a user the way sign-up does, including the profile rows."""
        user_metadata.setdefault("role", "patient")
        user_metadata.setdefault("first_name", "Test")
        user_metadata.setdefault("last_name", "User")

        user = {"id": str(uuid.uuid4()), "email": email, "password": password, "user_metadata": user_metadata}
        self.users[email] = user
        self._create_profile(user)
        return user

    def token_for(self, email: str, **kwargs) -> str:
        user = self.users[email]
        return make_access_token(user["id"], email, user["user_metadata"], **kwargs)

    def auth_headers(self, user: Dict[str, Any]) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token_for(user['email'])}"}

    # Transport entry point
    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.startswith("/rest/v1/"):
            return self._rest(request, path[len("/rest/v1/"):])
        if path == "/auth/v1/token":
            return self._token(request)
        if path == "/auth/v1/signup":
            return self._signup(request)
        if path == "/auth/v1/logout":
            if not request.headers.get("Authorization", "").startswith("Bearer "):
                return error(401, "no_authorization", "This endpoint requires a Bearer token")
            return httpx.Response(204)
        return error(404, "not_found", f"No route for {path}")

    # Auth
    def _session(self, user: Dict[str, Any]) -> Dict[str, Any]:
        refresh_token = uuid.uuid4().hex
        self.refresh_tokens[refresh_token] = user["email"]
        return {
            "access_token": self.token_for(user["email"]),
            "token_type": "bearer",
            "expires_in": 3600,
            "refresh_token": refresh_token,
            "user": self._public_user(user),
        }

    @staticmethod
    def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
        return {"id": user["id"], "email": user["email"], "user_metadata": user["user_metadata"]}

    def _token(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        grant_type = request.url.params.get("grant_type")

        if grant_type == "password":
            user = self.users.get(body.get("email"))
            if not user or user["password"] != body.get("password"):
                return httpx.Response(400, json={
                    "code": 400, "error_code": "invalid_credentials", "msg": "Invalid login credentials"
                })
            return httpx.Response(200, json=self._session(user))

        if grant_type == "refresh_token":
            email = self.refresh_tokens.pop(body.get("refresh_token"), None)
            if email is None:
                return httpx.Response(400, json={
                    "code": 400,
                    "error_code": "refresh_token_not_found",
                    "msg": "Invalid Refresh Token: Refresh Token Not Found",
                })
            return httpx.Response(200, json=self._session(self.users[email]))

        return httpx.Response(400, json={"code": 400, "msg": f"Unsupported grant type: {grant_type}"})

    def _signup(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if body["email"] in self.users:
            return httpx.Response(422, json={
                "code": 422, "error_code": "user_already_exists", "msg": "User already registered"
            })

        user = self.add_user(body["email"], body["password"], **body.get("data", {}))
        if self.confirm_email:
            return httpx.Response(200, json=self._public_user(user))
        return httpx.Response(200, json=self._session(user))

    def _create_profile(self, user: Dict[str, Any]):
        # mirrors the backend's on-signup trigger
        meta = user["user_metadata"]
        self.insert(
            "profiles",
            user_id=user["id"],
            email=user["email"],
            first_name=meta.get("first_name", ""),
            last_name=meta.get("last_name", ""),
            phone=meta.get("phone") or None,
            date_of_birth=meta.get("date_of_birth") or None,
            role=meta["role"],
        )
        if meta["role"] == "doctor":
            self.insert(
                "doctor_profiles",
                user_id=user["id"],
                license_number=meta.get("license_number", ""),
                specialization=meta.get("specialization") or "general_practice",
                years_of_experience=meta.get("years_of_experience"),
                consultation_fee=meta.get("consultation_fee"),
                bio=meta.get("bio") or None,
                education=meta.get("education") or None,
                is_verified=meta.get("is_verified", False),
            )
        elif meta["role"] == "patient":
            self.insert("patient_profiles", user_id=user["id"])

    # REST
    def _rest(self, request: httpx.Request, table_name: str) -> httpx.Response:
        if table_name not in TABLES:
            return error(404, "42P01", f'relation "public.{table_name}" does not exist')
        if table_name in self.failing_tables:
            return error(500, "XX000", f"simulated failure reading {table_name}")

        table = TABLES[table_name].model.__table__
        select_expr, order_by, limit, offset, conditions = "*", [], None, 0, []

        for key, value in request.url.params.multi_items():
            if key == "select":
                select_expr = value
            elif key == "order":
                column, _, direction = value.rpartition(".")
                order_by.append(table.c[column].desc() if direction == "desc" else table.c[column].asc())
            elif key == "limit":
                limit = int(value)
            elif key == "offset":
                offset = int(value)
            else:
                op, _, raw = value.partition(".")
                column = table.c[key]
                if op == "is":
                    conditions.append(column.is_(coerce(column, raw)))
                else:
                    conditions.append(OPERATORS[op](column, coerce(column, raw)))

        with self.engine.begin() as conn:
            if request.method in ("GET", "HEAD"):
                total = conn.execute(select(func.count()).select_from(table).where(*conditions)).scalar_one()
                stmt = select(table).where(*conditions).order_by(*order_by)
                if self.max_rows is not None:
                    limit = min(limit, self.max_rows) if limit is not None else self.max_rows
                if limit is not None:
                    stmt = stmt.limit(limit)
                if offset:
                    stmt = stmt.offset(offset)
                rows = [dict(row._mapping) for row in conn.execute(stmt)]
                status_code = 200
            else:
                body = json.loads(request.content)
                if request.method == "POST":
                    ids = []
                    for item in body if isinstance(body, list) else [body]:
                        item.setdefault("id", str(uuid.uuid4()))
                        conn.execute(insert(table).values(
                            **{name: coerce(table.c[name], value) for name, value in item.items()}
                        ))
                        ids.append(item["id"])
                    status_code = 201
                else:
                    ids = [row.id for row in conn.execute(select(table.c.id).where(*conditions))]
                    conn.execute(update(table).where(*conditions).values(
                        **{name: coerce(table.c[name], value) for name, value in body.items()}
                    ))
                    status_code = 200
                rows = [dict(row._mapping) for row in conn.execute(select(table).where(table.c.id.in_(ids)))]
                total = len(rows)

            try:
                data = [self._project(conn, table, row, select_expr) for row in rows]
            except LookupError as e:
                return error(400, "PGRST200", str(e))

        headers = {}
        if "count=exact" in request.headers.get("Prefer", ""):
            headers["Content-Range"] = f"0-{len(rows) - 1}/{total}" if rows else f"*/{total}"

        body: Any = data
        if request.headers.get("Accept") == OBJECT_MEDIA_TYPE:
            if len(data) != 1:
                return error(
                    406, "PGRST116", "JSON object requested, multiple (or no) rows returned",
                    details=f"The result contains {len(data)} rows",
                )
            body = data[0]

        if request.method == "HEAD":
            return httpx.Response(status_code, headers=headers)
        return httpx.Response(status_code, json=body, headers=headers)

    def _project(self, conn, table, row: Dict[str, Any], select_expr: str) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for item in split_select(select_expr):
            if item == "*":
                result.update({key: serialize(value) for key, value in row.items()})
            elif "(" in item:
                name, _, inner = item.partition("(")
                child = TABLES[name].model.__table__
                result[name] = [
                    self._project(conn, child, dict(child_row._mapping), inner.rstrip(")"))
                    for child_row in conn.execute(self._children(child, table, row))
                ]
            else:
                result[item] = serialize(row[item])
        return result

    @staticmethod
    def _children(child, parent, row: Dict[str, Any]):
        for fk in child.foreign_keys:
            if fk.column.table is parent:
                return select(child).where(fk.parent == row[fk.column.name])
        raise LookupError(f"Could not find a relationship between '{parent.name}' and '{child.name}'")
