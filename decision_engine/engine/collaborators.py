"""
Collaborators the node handlers delegate to.

Each is a single-method capability taking a descriptor and the execution
context. The defaults below can be swapped per executor.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import aiosqlite
import httpx
from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from ..core.exceptions import DecisionEngineError
from ..schemas.workflow import (
    BusinessLogicDescriptor,
    DataSourceDescriptor,
    ValidationDescriptor,
)
from .expression_engine import ExpressionEngine, expression_engine
from .types import ExecutionContext, UnknownDescriptor

logger = logging.getLogger(__name__)


class BusinessLogicExecutor(ABC):
    """Runs the business logic of action and decision nodes."""

    @abstractmethod
    async def execute(
        self, descriptor: BusinessLogicDescriptor, context: ExecutionContext
    ) -> Any:
        ...


class DataFetcher(ABC):
    """Fetches external data. Must be safe to call from concurrent branches."""

    @abstractmethod
    async def fetch(
        self, descriptor: DataSourceDescriptor, context: ExecutionContext
    ) -> dict[str, Any] | UnknownDescriptor:
        ...


class Validator(ABC):
    """Validates the application payload."""

    @abstractmethod
    async def validate(
        self, descriptor: ValidationDescriptor, context: ExecutionContext
    ) -> bool:
        ...


async def _request(
    context: ExecutionContext,
    method: str,
    url: str,
    timeout: float,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request on the execution's shared client, or a one-off client."""
    if context.http_client is not None:
        response = await context.http_client.request(method, url, **kwargs)
    else:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.request(method, url, **kwargs)
    response.raise_for_status()
    return response


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class DefaultBusinessLogicExecutor(BusinessLogicExecutor):
    """`custom` evaluates an embedded expression, `service_call` POSTs to a service."""

    def __init__(
        self,
        engine: ExpressionEngine | None = None,
        http_timeout: float = 30.0,
    ) -> None:
        self._engine = engine or expression_engine
        self._http_timeout = http_timeout

    async def execute(
        self, descriptor: BusinessLogicDescriptor, context: ExecutionContext
    ) -> Any:
        if descriptor.type == "custom":
            if not descriptor.implementation:
                return {"result": "Custom logic executed", "implementation": None}
            names = ExpressionEngine.create_names(
                context.input_data, context.output_data, descriptor.parameters
            )
            value = self._engine.evaluate(descriptor.implementation, names)
            return {"result": value, "implementation": descriptor.implementation}

        if descriptor.type == "service_call":
            if not descriptor.endpoint:
                return {"result": "Service called", "service": descriptor.service}
            response = await _request(
                context,
                "POST",
                descriptor.endpoint,
                self._http_timeout,
                json={
                    "service": descriptor.service,
                    "parameters": descriptor.parameters,
                    "data": context.input_data,
                },
            )
            return {"result": _body(response), "service": descriptor.service}

        logger.debug("Unknown business logic type %r", descriptor.type)
        return UnknownDescriptor(descriptor.type)


class DefaultDataFetcher(DataFetcher):
    """Fetches from HTTP APIs, SQLite databases and local files."""

    def __init__(self, data_root: str | Path | None = None, http_timeout: float = 30.0) -> None:
        self._data_root = Path(data_root).resolve() if data_root else None
        self._http_timeout = http_timeout

    async def fetch(
        self, descriptor: DataSourceDescriptor, context: ExecutionContext
    ) -> dict[str, Any] | UnknownDescriptor:
        if descriptor.type == "api":
            data = await self._fetch_api(descriptor, context)
        elif descriptor.type == "database":
            data = await self._fetch_database(descriptor)
        elif descriptor.type == "file":
            data = await self._fetch_file(descriptor)
        else:
            logger.debug("Unknown data source type %r", descriptor.type)
            return UnknownDescriptor(descriptor.type)

        # Named sources keep their payload under one key of the output map
        if descriptor.name:
            return {descriptor.name: data}
        return data

    async def _fetch_api(
        self, descriptor: DataSourceDescriptor, context: ExecutionContext
    ) -> dict[str, Any]:
        if not descriptor.url:
            raise DecisionEngineError("API data source has no url", {"type": "api"})
        response = await _request(
            context,
            descriptor.method.upper(),
            descriptor.url,
            self._http_timeout,
            headers=descriptor.headers,
            params=descriptor.params,
        )
        body = _body(response)
        return body if isinstance(body, dict) else {"data": body}

    async def _fetch_database(self, descriptor: DataSourceDescriptor) -> dict[str, Any]:
        if not descriptor.database or not descriptor.query:
            raise DecisionEngineError(
                "Database data source needs both database and query",
                {"type": "database"},
            )
        db_path = self._resolve_path(descriptor.database).resolve()
        if not db_path.is_file():
            raise DecisionEngineError(
                f"Database not found: {descriptor.database}",
                {"type": "database", "database": descriptor.database},
            )
        # Read-only so a data source can never create or modify the file
        async with aiosqlite.connect(f"{db_path.as_uri()}?mode=ro", uri=True) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(descriptor.query, descriptor.query_parameters)
            rows = await cursor.fetchall()
            columns = [d[0] for d in cursor.description] if cursor.description else []
        records = [{col: row[i] for i, col in enumerate(columns)} for row in rows]
        return {"records": records, "count": len(records)}

    async def _fetch_file(self, descriptor: DataSourceDescriptor) -> dict[str, Any]:
        if not descriptor.path:
            raise DecisionEngineError("File data source has no path", {"type": "file"})
        path = self._resolve_path(descriptor.path)
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        if path.suffix.lower() != ".json":
            return {"content": text}
        parsed = json.loads(text)
        return parsed if isinstance(parsed, dict) else {"content": parsed}

    def _resolve_path(self, raw: str) -> Path:
        path = Path(raw)
        if self._data_root is None:
            return path
        resolved = (self._data_root / path).resolve()
        if not resolved.is_relative_to(self._data_root):
            raise DecisionEngineError(
                f"Path escapes the data root: {raw}", {"path": raw}
            )
        return resolved


class DefaultValidator(Validator):
    """`schema` validates the input against a JSON Schema, `custom` evaluates a rule."""

    def __init__(self, engine: ExpressionEngine | None = None) -> None:
        self._engine = engine or expression_engine

    async def validate(
        self, descriptor: ValidationDescriptor, context: ExecutionContext
    ) -> bool:
        if descriptor.type == "schema":
            return self._check_schema(descriptor.schema_, context.input_data)

        if descriptor.type == "custom":
            if not descriptor.rule:
                return True
            names = ExpressionEngine.create_names(context.input_data, context.output_data)
            return bool(self._engine.evaluate(descriptor.rule, names))

        return True

    def _check_schema(self, schema: dict[str, Any], data: dict[str, Any]) -> bool:
        try:
            validator = Draft202012Validator(schema)
            validator.check_schema(schema)
        except SchemaError as e:
            raise DecisionEngineError(
                f"Invalid validation schema: {e.message}", {"type": "schema"}
            ) from e

        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
        for error in errors:
            logger.debug("Schema violation at %s: %s", list(error.path) or "$", error.message)
        return not errors


@dataclass
class Collaborators:
    """The set of collaborators one executor hands to its node handlers."""

    business_logic: BusinessLogicExecutor = field(default_factory=DefaultBusinessLogicExecutor)
    data_fetcher: DataFetcher = field(default_factory=DefaultDataFetcher)
    validator: Validator = field(default_factory=DefaultValidator)

    @classmethod
    def from_settings(cls, settings: Any) -> Collaborators:
        return cls(
            business_logic=DefaultBusinessLogicExecutor(http_timeout=settings.http_timeout),
            data_fetcher=DefaultDataFetcher(
                data_root=settings.data_root, http_timeout=settings.http_timeout
            ),
            validator=DefaultValidator(),
        )
