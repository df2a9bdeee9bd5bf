"""Async client for the hosted backend.

Tables are reached through the REST interface under ``/rest/v1`` and the
auth service under ``/auth/v1``. Every query is checked against the schema
registry before it is sent, so a typo in a table or column name fails here
rather than as a 400 from the backend.
"""
from datetime import date, datetime
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union
import enum
import logging

import httpx
from pydantic import BaseModel

from .config import settings
from ..schemas.tables import check_column, get_table

logger = logging.getLogger(__name__)

OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"
COUNT_METHODS = ("exact", "planned", "estimated")


class BackendError(Exception):
    """A backend call failed (non-2xx reply or transport error)."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @classmethod
    def from_response(cls, response: httpx.Response) -> "BackendError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or response.text
            or response.reason_phrase
        )
        code = body.get("code") or body.get("error_code") or body.get("error")
        return cls(str(message), status_code=response.status_code, code=str(code) if code is not None else None)

    def __str__(self):
        return f"{self.message} (status={self.status_code}, code={self.code})"


class QueryResult(NamedTuple):
    data: Any
    count: Optional[int] = None


def format_filter_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def split_select(select: str) -> List[str]:
    """Split a select list on top-level commas: ``"*,a(*),b(x,y)"`` -> ``["*", "a(*)", "b(x,y)"]``."""
    items, depth, current = [], 0, ""
    for char in select:
        if char == "," and depth == 0:
            items.append(current.strip())
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    if current.strip():
        items.append(current.strip())
    return items


def parse_content_range(header: Optional[str]) -> Optional[int]:
    # "0-24/3573" or "*/0"; the total is "*" when it was not requested
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


class TableQuery:
    """One request against one table, built up by chaining and sent with ``execute()``."""

    def __init__(self, client: "BackendClient", table: str):
        self.schema = get_table(table)
        self.table = table
        self._client = client
        self._method = "GET"
        self._params: List[Tuple[str, str]] = []
        self._prefer: List[str] = []
        self._headers: Dict[str, str] = {}
        self._body: Any = None

    # Verbs
    def select(self, *columns: str, count: Optional[str] = None, head: bool = False) -> "TableQuery":
        items = []
        for column in columns or ("*",):
            items.extend(split_select(column))
        self._params.append(("select", ",".join(self._check_select(item, self.table) for item in items)))

        if count:
            if count not in COUNT_METHODS:
                raise ValueError(f"count must be one of {COUNT_METHODS}")
            self._prefer.append(f"count={count}")
        if head:
            self._method = "HEAD"
        return self

    def insert(self, values: Union[BaseModel, Dict[str, Any], List[Dict[str, Any]]]) -> "TableQuery":
        self._method = "POST"
        if isinstance(values, list):
            self._body = [self._payload(self.schema.insert, item) for item in values]
        else:
            self._body = self._payload(self.schema.insert, values)
        self._prefer.append("return=representation")
        return self

    def update(self, values: Union[BaseModel, Dict[str, Any]]) -> "TableQuery":
        self._method = "PATCH"
        self._body = self._payload(self.schema.update, values)
        self._prefer.append("return=representation")
        return self

    # Filters
    def eq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "neq", value)

    def gt(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "gt", value)

    def gte(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "gte", value)

    def lt(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "lt", value)

    def lte(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "lte", value)

    def is_(self, column: str, value: Optional[bool]) -> "TableQuery":
        return self._filter(column, "is", value)

    # Modifiers
    def order(self, column: str, desc: bool = False) -> "TableQuery":
        check_column(self.table, column)
        self._params.append(("order", f"{column}.{'desc' if desc else 'asc'}"))
        return self

    def limit(self, count: int) -> "TableQuery":
        self._params.append(("limit", str(count)))
        return self

    def offset(self, count: int) -> "TableQuery":
        self._params.append(("offset", str(count)))
        return self

    def single(self) -> "TableQuery":
        """Expect exactly one row; the result data is that row, not a list."""
        self._headers["Accept"] = OBJECT_MEDIA_TYPE
        return self

    async def execute(self) -> QueryResult:
        headers = dict(self._headers)
        if self._prefer:
            headers["Prefer"] = ",".join(self._prefer)

        response = await self._client.request(
            self._method,
            f"/rest/v1/{self.table}",
            params=self._params,
            json=self._body,
            headers=headers,
        )

        count = parse_content_range(response.headers.get("Content-Range")) if any(
            p.startswith("count=") for p in self._prefer
        ) else None
        data = None
        if self._method != "HEAD" and response.content:
            data = response.json()
        return QueryResult(data=data, count=count)

    def _filter(self, column: str, operator: str, value: Any) -> "TableQuery":
        check_column(self.table, column)
        self._params.append((column, f"{operator}.{format_filter_value(value)}"))
        return self

    @staticmethod
    def _check_select(item: str, table: str) -> str:
        if item == "*":
            return item
        if "(" in item:
            # embedded related table: name(col, col, ...)
            name, _, inner = item.partition("(")
            name = name.strip()
            get_table(name)
            for column in split_select(inner.rstrip(")")):
                TableQuery._check_select(column, name)
            return item
        return check_column(table, item)

    def _payload(self, shape, values) -> Dict[str, Any]:
        if not isinstance(values, shape):
            if isinstance(values, BaseModel):
                values = values.model_dump(exclude_unset=True)
            for column in values:
                check_column(self.table, column)
            values = shape.model_validate(values)
        return values.model_dump(mode="json", exclude_unset=True)


class AuthAPI:
    """Password sign-in, sign-up, sign-out and session refresh against ``/auth/v1``."""

    def __init__(self, client: "BackendClient"):
        self._client = client

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        response = await self._client.request(
            "POST", "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            token=self._client.api_key,
        )
        return response.json()

    async def sign_up(self, email: str, password: str, data: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._client.request(
            "POST", "/auth/v1/signup",
            json={"email": email, "password": password, "data": data},
            token=self._client.api_key,
        )
        return response.json()

    async def sign_out(self, access_token: str) -> None:
        await self._client.request("POST", "/auth/v1/logout", token=access_token)

    async def refresh_session(self, refresh_token: str) -> Dict[str, Any]:
        response = await self._client.request(
            "POST", "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
            token=self._client.api_key,
        )
        return response.json()


class BackendClient:
    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.access_token = access_token
        self.api_key = api_key if api_key is not None else settings.BACKEND_ANON_KEY
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.BACKEND_URL,
            headers={"apikey": self.api_key},
            timeout=timeout or settings.BACKEND_TIMEOUT,
            transport=transport,
        )
        self.auth = AuthAPI(self)

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    async def request(
        self,
        method: str,
        path: str,
        params=None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        token: Optional[str] = None,
    ) -> httpx.Response:
        request_headers = dict(headers or {})
        bearer = token or self.access_token or self.api_key
        if bearer:
            request_headers["Authorization"] = f"Bearer {bearer}"

        try:
            response = await self._http.request(method, path, params=params, json=json, headers=request_headers)
        except httpx.HTTPError as e:
            logger.error(f"Backend request {method} {path} failed: {str(e)}")
            raise BackendError(f"Backend unavailable: {str(e)}") from e

        if response.is_error:
            raise BackendError.from_response(response)
        return response

    async def aclose(self):
        await self._http.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
