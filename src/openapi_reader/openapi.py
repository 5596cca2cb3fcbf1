"""OpenAPI document loader."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import unquote

import httpx
import yaml

from .models import (
    HTTP_METHODS,
    Description,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
)


logger = logging.getLogger(__name__)

DEFAULT_FILENAMES = ("openapi.yaml", "openapi.yml")


class OpenAPILoadError(Exception):
    pass


def is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def resolve_openapi_path(path: str) -> str:
    """Turn a file, directory or URL into the location of a single document.

    Directories are probed for ``openapi.yaml`` first, then ``openapi.yml``.
    """
    if is_url(path):
        return path

    if not os.path.exists(path):
        raise OpenAPILoadError(f"path does not exist: {path}")

    if os.path.isdir(path):
        for filename in DEFAULT_FILENAMES:
            candidate = os.path.join(path, filename)
            if os.path.isfile(candidate):
                return candidate
        raise OpenAPILoadError(f"openapi.yaml or openapi.yml not found in directory: {path}")

    return path


class OpenAPILoader:
    def __init__(self, timeout_seconds: float = 30, strict_operation_ids: bool = False) -> None:
        self.timeout_seconds = timeout_seconds
        self.strict_operation_ids = strict_operation_ids

    async def load(self, source: str) -> Description:
        location = resolve_openapi_path(source)
        raw = await self.load_spec(location)
        description = self.build_description(raw)
        logger.info(
            "Loaded OpenAPI spec %s (%d paths, %d operations)",
            location,
            len(description.paths),
            description.operation_count(),
        )
        return description

    async def load_spec(self, location: str) -> Dict[str, Any]:
        if is_url(location):
            text = await self._fetch(location)
        else:
            try:
                text = Path(location).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise OpenAPILoadError(f"failed to read {location}: {exc}") from exc

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise OpenAPILoadError(f"failed to parse {location}: {exc}") from exc

        if not isinstance(data, dict):
            raise OpenAPILoadError(f"{location} does not contain an OpenAPI document")
        return data

    async def _fetch(self, url: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            raise OpenAPILoadError(f"failed to fetch {url}: {exc}") from exc

        if response.status_code != 200:
            raise OpenAPILoadError(f"failed to fetch {url}: HTTP {response.status_code}")
        return response.text

    def build_description(self, spec: Dict[str, Any]) -> Description:
        version = str(spec.get("openapi") or spec.get("swagger") or "")
        if not version.startswith("3.") or "openapi" not in spec:
            raise OpenAPILoadError(f"unsupported OpenAPI version: {version or 'missing'}")

        paths = spec.get("paths") or {}
        if not isinstance(paths, dict):
            raise OpenAPILoadError("'paths' must be a mapping")

        refs = RefResolver(spec)
        seen: Dict[str, Tuple[str, str]] = {}
        items: Dict[str, PathItem] = {}

        for path, raw_item in paths.items():
            # Inlines every local reference below the path item in one pass.
            raw_item = refs.resolve(raw_item)
            if not isinstance(raw_item, dict):
                logger.debug("Skipping non-mapping path item: %s", path)
                continue

            operations: Dict[str, Operation] = {}
            for method in HTTP_METHODS:
                raw_operation = raw_item.get(method.lower())
                if not isinstance(raw_operation, dict):
                    continue
                where = f"{method} {path}"
                operation = self._build_operation(raw_operation, where)
                if operation.operation_id is not None:
                    self._check_duplicate(seen, operation.operation_id, method, str(path))
                operations[method.lower()] = operation

            items[str(path)] = PathItem(**operations)

        return Description(paths=MappingProxyType(items))

    def _check_duplicate(
        self, seen: Dict[str, Tuple[str, str]], operation_id: str, method: str, path: str
    ) -> None:
        previous = seen.get(operation_id)
        if previous is None:
            seen[operation_id] = (method, path)
            return

        message = (
            f"duplicate operationId '{operation_id}': {previous[0]} {previous[1]} "
            f"and {method} {path}"
        )
        if self.strict_operation_ids:
            raise OpenAPILoadError(message)
        logger.warning("%s; the first declaration wins", message)

    def _build_operation(self, operation: Dict[str, Any], where: str) -> Operation:
        return Operation(
            operation_id=_text(operation, "operationId", where),
            summary=_text(operation, "summary", where) or "",
            description=_text(operation, "description", where) or "",
            parameters=tuple(self._build_parameters(operation.get("parameters") or [], where)),
            request_body=self._build_request_body(operation.get("requestBody"), where),
            responses=self._build_responses(operation.get("responses") or {}),
        )

    def _build_parameters(self, parameters: List[Any], where: str) -> List[Parameter]:
        result: List[Parameter] = []
        for index, parameter in enumerate(parameters):
            if not isinstance(parameter, dict):
                continue
            location = f"{where} parameter #{index}"
            result.append(
                Parameter(
                    name=_text(parameter, "name", location) or "",
                    location=_text(parameter, "in", location) or "",
                    required=bool(parameter.get("required", False)),
                    description=_text(parameter, "description", location) or None,
                    schema=parameter.get("schema"),
                )
            )
        return result

    def _build_request_body(self, body: Any, where: str) -> Optional[RequestBody]:
        if not isinstance(body, dict):
            return None
        content = body.get("content")
        if not isinstance(content, dict):
            content = {}
        return RequestBody(
            description=_text(body, "description", f"{where} requestBody") or None,
            required=bool(body.get("required", False)),
            content=MappingProxyType({str(k): v for k, v in content.items()}),
        )

    def _build_responses(self, responses: Any) -> Mapping[str, Any]:
        if not isinstance(responses, dict):
            return MappingProxyType({})
        # YAML reads bare status codes as integers
        return MappingProxyType({str(status): value for status, value in responses.items()})


def _text(node: Dict[str, Any], key: str, where: str) -> Optional[str]:
    """Return ``node[key]`` when it is a string, None when absent."""
    value = node.get(key)
    if value is None or isinstance(value, str):
        return value
    raise OpenAPILoadError(
        f"{where}: '{key}' must be a string, got {type(value).__name__} {value!r}"
    )


class RefResolver:
    """Inline local ``#/...`` references of a single document.

    References to other files or URLs are left as they are. A reference that
    loops back onto itself is kept as the original ``{"$ref": ...}`` node.
    """

    def __init__(self, document: Dict[str, Any]) -> None:
        self.document = document

    def resolve(self, node: Any, stack: Tuple[str, ...] = ()) -> Any:
        if isinstance(node, list):
            return [self.resolve(item, stack) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if not isinstance(ref, str) or not ref.startswith("#"):
            return {key: self.resolve(value, stack) for key, value in node.items()}

        if ref in stack:
            return dict(node)

        target = self.lookup(ref)
        siblings = {key: value for key, value in node.items() if key != "$ref"}
        if siblings and isinstance(target, dict):
            target = {**target, **siblings}
        return self.resolve(target, stack + (ref,))

    def lookup(self, ref: str) -> Any:
        node: Any = self.document
        pointer = ref[1:]
        if not pointer:
            return node
        if not pointer.startswith("/"):
            raise OpenAPILoadError(f"unsupported reference: {ref}")

        for raw_token in pointer[1:].split("/"):
            token = unquote(raw_token).replace("~1", "/").replace("~0", "~")
            if isinstance(node, list):
                try:
                    node = node[int(token)]
                except (ValueError, IndexError) as exc:
                    raise OpenAPILoadError(f"unresolved reference: {ref}") from exc
            elif isinstance(node, dict) and token in node:
                node = node[token]
            else:
                raise OpenAPILoadError(f"unresolved reference: {ref}")
        return node
