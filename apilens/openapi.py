"""OpenAPI / Swagger document parsing.

Documents are loaded from YAML or JSON, local ``$ref`` pointers are resolved
in place, and the result is reduced to the operations, parameters, response
schemas and security schemes that drive field analysis.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .models import OpenApiHints

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("get", "post", "put", "patch")
PARAMETER_FIELDS = ("type", "format", "enum", "default", "minimum", "maximum", "maxLength")


class SpecParseError(RuntimeError):
    """Raised when an OpenAPI document cannot be parsed; wraps the underlying cause."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


@dataclass(slots=True)
class ParsedParameter:
    name: str
    location: str
    required: bool
    description: str = ""
    schema: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ParsedOperation:
    path: str
    method: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: list[ParsedParameter] = field(default_factory=list)
    request_body_schema: Optional[dict[str, Any]] = None
    response_schema: Optional[dict[str, Any]] = None
    tags: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ParsedSecurityScheme:
    name: str
    auth_type: Optional[str]
    description: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class ParsedSpec:
    """Reduced view of an OpenAPI document."""

    title: str
    version: str
    spec_version: str
    base_url: str
    operations: list[ParsedOperation] = field(default_factory=list)
    security_schemes: list[ParsedSecurityScheme] = field(default_factory=list)

    def find_operation(self, path: str, method: str = "get") -> Optional[ParsedOperation]:
        for operation in self.operations:
            if operation.path == path and operation.method == method.upper():
                return operation
        return None


def map_security_scheme(name: str, scheme: dict[str, Any]) -> ParsedSecurityScheme:
    """Map an OpenAPI security scheme onto a supported auth type, or None with a reason."""

    description = scheme.get("description") or name
    scheme_type = scheme.get("type")

    if scheme_type == "apiKey":
        location = scheme.get("in")
        if location == "header":
            return ParsedSecurityScheme(name, "apiKey", description, {"header_name": scheme.get("name", "")})
        if location == "query":
            return ParsedSecurityScheme(name, "queryParam", description, {"param_name": scheme.get("name", "")})
        if location == "cookie":
            return _unsupported(name, description, "Cookie-based authentication is not supported")
    if scheme_type == "http":
        http_scheme = str(scheme.get("scheme", "")).lower()
        if http_scheme == "bearer":
            return ParsedSecurityScheme(name, "bearer", description)
        if http_scheme == "basic":
            return ParsedSecurityScheme(name, "basic", description)
    if scheme_type == "basic":
        return ParsedSecurityScheme(name, "basic", description)
    if scheme_type == "oauth2":
        return _unsupported(name, description, "OAuth 2.0 requires browser-based authorization flow")
    if scheme_type == "openIdConnect":
        return _unsupported(name, description, "OpenID Connect requires browser-based authorization flow")
    return _unsupported(name, description, "Unknown security scheme type")


def _unsupported(name: str, description: str, reason: str) -> ParsedSecurityScheme:
    return ParsedSecurityScheme(name, None, f"{description} (unsupported: {reason})")


def map_security_schemes(schemes: dict[str, Any]) -> list[ParsedSecurityScheme]:
    return [map_security_scheme(name, scheme or {}) for name, scheme in schemes.items()]


def _resolve_pointer(document: dict[str, Any], ref: str) -> Any:
    if not ref.startswith("#/"):
        raise ValueError(f"external reference {ref!r} is not supported")
    node: Any = document
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            raise ValueError(f"unresolvable reference {ref!r}")
        node = node[part]
    return node


def dereference(document: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of the document with local ``$ref`` pointers inlined."""

    def _walk(node: Any, active: tuple[str, ...]) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                if ref in active:
                    # Recursive schemas stop at the first repetition.
                    return {}
                return _walk(_resolve_pointer(document, ref), active + (ref,))
            return {key: _walk(value, active) for key, value in node.items()}
        if isinstance(node, list):
            return [_walk(item, active) for item in node]
        return node

    return _walk(copy.deepcopy(document), ())


def _base_url(document: dict[str, Any], is_v3: bool) -> str:
    if is_v3:
        servers = document.get("servers") or []
        return servers[0].get("url", "") if servers else ""
    schemes = document.get("schemes") or ["https"]
    return f"{schemes[0]}://{document.get('host', '')}{document.get('basePath', '')}"


def _parse_parameter(param: dict[str, Any], is_v3: bool) -> ParsedParameter:
    location = param.get("in", "query")
    source = (param.get("schema") or {}) if is_v3 else param
    schema = {key: source[key] for key in PARAMETER_FIELDS if key in source}
    schema.setdefault("type", "string")
    example = param.get("example", source.get("example")) if is_v3 else param.get("x-example")
    if example is not None:
        schema["example"] = example
    return ParsedParameter(
        name=param.get("name", ""),
        location=location,
        required=bool(param.get("required", location == "path")),
        description=param.get("description", ""),
        schema=schema,
    )


def _merge_parameters(path_params: list[dict[str, Any]], op_params: list[dict[str, Any]]) -> list[dict[str, Any]]:
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for param in [*path_params, *op_params]:
        merged[(param.get("name", ""), param.get("in", ""))] = param
    return list(merged.values())


def _json_content_schema(content: dict[str, Any]) -> Optional[dict[str, Any]]:
    if not content:
        return None
    media = content.get("application/json") or next(iter(content.values()))
    return (media or {}).get("schema")


def _response_schema(operation: dict[str, Any], is_v3: bool) -> Optional[dict[str, Any]]:
    responses = operation.get("responses") or {}
    for status in sorted(str(code) for code in responses):
        if not (len(status) == 3 and status.startswith("2") and status.isdigit()):
            continue
        response = responses.get(status, responses.get(int(status))) or {}
        if is_v3:
            return _json_content_schema(response.get("content") or {})
        return response.get("schema")
    return None


def _request_body_schema(operation: dict[str, Any], params: list[dict[str, Any]], is_v3: bool) -> Optional[dict[str, Any]]:
    if is_v3:
        return _json_content_schema((operation.get("requestBody") or {}).get("content") or {})
    for param in params:
        if param.get("in") == "body":
            return param.get("schema")
    return None


def parse_spec(document: Any, *, source: Optional[str] = None) -> ParsedSpec:
    """Parse an OpenAPI 3.x or Swagger 2.0 document."""

    origin = f" from {source}" if source else ""
    try:
        if not isinstance(document, dict):
            raise ValueError("document root must be a mapping")
        if "openapi" in document:
            is_v3 = True
            spec_version = str(document["openapi"])
        elif "swagger" in document:
            is_v3 = False
            spec_version = str(document["swagger"])
        else:
            raise ValueError("missing 'openapi' or 'swagger' version field")
        if not spec_version.startswith("3." if is_v3 else "2."):
            raise ValueError(f"unsupported specification version {spec_version}")

        resolved = dereference(document)
        info = resolved.get("info") or {}
        operations: list[ParsedOperation] = []
        for path, path_item in (resolved.get("paths") or {}).items():
            if not isinstance(path_item, dict):
                continue
            path_params = path_item.get("parameters") or []
            for method in SUPPORTED_METHODS:
                operation = path_item.get(method)
                if not isinstance(operation, dict):
                    continue
                params = _merge_parameters(path_params, operation.get("parameters") or [])
                operations.append(
                    ParsedOperation(
                        path=path,
                        method=method.upper(),
                        operation_id=operation.get("operationId"),
                        summary=operation.get("summary"),
                        description=operation.get("description"),
                        parameters=[_parse_parameter(p, is_v3) for p in params if p.get("in") != "body"],
                        request_body_schema=_request_body_schema(operation, params, is_v3),
                        response_schema=_response_schema(operation, is_v3),
                        tags=list(operation.get("tags") or []),
                    )
                )
        if is_v3:
            schemes = (resolved.get("components") or {}).get("securitySchemes") or {}
        else:
            schemes = resolved.get("securityDefinitions") or {}
        logger.debug("Parsed %d operations%s (OpenAPI %s)", len(operations), origin, spec_version)
        return ParsedSpec(
            title=str(info.get("title", "")),
            version=str(info.get("version", "")),
            spec_version=spec_version,
            base_url=_base_url(resolved, is_v3),
            operations=operations,
            security_schemes=map_security_schemes(schemes),
        )
    except SpecParseError:
        raise
    except Exception as exc:
        raise SpecParseError(f"Failed to parse OpenAPI spec{origin}: {exc}", cause=exc) from exc


def load_spec(path: Path) -> ParsedSpec:
    """Read a YAML or JSON OpenAPI document from disk and parse it."""

    spec_path = Path(path)
    try:
        document = yaml.safe_load(spec_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise SpecParseError(f"Failed to parse OpenAPI spec from {spec_path}: {exc}", cause=exc) from exc
    return parse_spec(document, source=str(spec_path))


def response_field_hints(schema: Optional[dict[str, Any]], base_path: str = "$") -> dict[str, OpenApiHints]:
    """Map analysis field paths to the format/description a response schema declares."""

    hints: dict[str, OpenApiHints] = {}

    def _visit(node: Any, path: str, depth: int) -> None:
        if not isinstance(node, dict) or depth > 10:
            return
        node_type = node.get("type")
        if node_type == "array" or "items" in node:
            _visit(node.get("items"), f"{path}[]", depth + 1)
            return
        for name, child in (node.get("properties") or {}).items():
            if not isinstance(child, dict):
                continue
            child_path = f"{path}.{name}"
            if child.get("format") or child.get("description"):
                hints[child_path] = OpenApiHints(format=child.get("format"), description=child.get("description"))
            _visit(child, child_path, depth + 1)

    _visit(schema, base_path, 0)
    return hints
