"""Introspection utilities that turn Python callables into tool schemas.

Reads type hints, docstrings, and parameter defaults to produce JSON Schema
tool definitions in the OpenAI function-calling format.
"""

from __future__ import annotations

import inspect
import types
import typing
from typing import Any, get_type_hints

# Reserved parameter name used to hand the live context to a tool.
CONTEXT_PARAM = "context_variables"

# Mapping from Python types to JSON Schema types
_PYTHON_TO_JSON_SCHEMA: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    dict: "object",
    list: "array",
    tuple: "array",
    type(None): "null",
}


def python_type_to_json_schema(annotation: Any) -> dict:
    """Convert a Python type annotation to a JSON Schema type descriptor.

    Handles basic types, ``list[...]``/``dict[...]`` generics, ``Optional``
    and ``Literal``. Unrecognized types fall back to ``{"type": "string"}``.

    Args:
        annotation: A Python type annotation (from inspect or typing).

    Returns:
        A dict like {"type": "string"} or {"type": "integer"}.
    """
    if annotation is inspect.Parameter.empty or annotation is None:
        return {"type": "string"}

    if annotation in _PYTHON_TO_JSON_SCHEMA:
        return {"type": _PYTHON_TO_JSON_SCHEMA[annotation]}

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Literal:
        values = list(args)
        schema = python_type_to_json_schema(type(values[0])) if values else {"type": "string"}
        schema["enum"] = values
        return schema

    if origin in (typing.Union, types.UnionType):
        non_null = [a for a in args if a is not type(None)]
        if len(non_null) == 1:
            return python_type_to_json_schema(non_null[0])
        return {"type": "string"}

    if origin in (list, tuple, set, frozenset):
        schema: dict[str, Any] = {"type": "array"}
        if origin is list and args:
            schema["items"] = python_type_to_json_schema(args[0])
        return schema
    if origin is dict:
        return {"type": "object"}

    return {"type": "string"}


def _extract_param_description(docstring: str | None, param_name: str) -> str:
    """Extract a parameter description from a docstring's Args section.

    Looks for patterns like ``param_name: Description text.``
    """
    if not docstring:
        return ""

    in_args = False
    for line in docstring.split("\n"):
        stripped = line.strip()
        if stripped.lower().startswith("args:"):
            in_args = True
            continue
        # Next section header (Returns:, Raises:, ...) ends the Args block
        if in_args and stripped.endswith(":") and " " not in stripped.rstrip(":"):
            in_args = False
            continue
        if in_args and stripped.startswith(f"{param_name}:"):
            return stripped[len(param_name) + 1 :].strip()
        if in_args and stripped.startswith(f"{param_name} ("):
            _, _, desc = stripped.partition(":")
            return desc.strip()
    return ""


def function_to_json(func: Any, name: str | None = None, description: str | None = None) -> dict:
    """Convert a callable to a JSON Schema tool definition.

    The reserved ``context_variables`` parameter is included like any other
    parameter here; the request builder removes it before anything reaches
    the model.

    Args:
        func: A function, bound method, or other callable.
        name: Tool name override. Defaults to ``func.__name__``.
        description: Description override. Defaults to the docstring summary.

    Returns:
        A dict with the structure::

            {
                "type": "function",
                "function": {
                    "name": "transfer_to_sales",
                    "description": "Hand the conversation to sales.",
                    "parameters": {
                        "type": "object",
                        "properties": { ... },
                        "required": [...]
                    }
                }
            }
    """
    tool_name = name or getattr(func, "__name__", None)
    if not tool_name:
        raise ValueError(f"Cannot derive a tool name from {func!r}; pass name=")

    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Failed to get signature for {tool_name}: {exc}") from exc

    docstring = inspect.getdoc(func) or ""
    if description is None:
        description = docstring.split("\n\n")[0].strip() if docstring else ""

    try:
        hints = get_type_hints(func)
    except Exception:
        hints = {}

    properties: dict[str, Any] = {}
    required: list[str] = []

    for param_name, param in sig.parameters.items():
        if param_name == "self":
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        annotation = hints.get(param_name, param.annotation)
        prop = python_type_to_json_schema(annotation)

        param_desc = _extract_param_description(docstring, param_name)
        if param_desc:
            prop["description"] = param_desc

        properties[param_name] = prop
        if param.default is inspect.Parameter.empty:
            required.append(param_name)

    return {
        "type": "function",
        "function": {
            "name": tool_name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


def accepts_context(func: Any) -> bool:
    """Whether *func* declares the reserved context parameter."""
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    return CONTEXT_PARAM in sig.parameters


def strip_context_param(parameters: dict) -> dict:
    """Return a copy of a parameters schema without the context parameter.

    Removes it from both ``properties`` and ``required``.
    """
    stripped = dict(parameters)
    properties = stripped.get("properties")
    if isinstance(properties, dict) and CONTEXT_PARAM in properties:
        stripped["properties"] = {k: v for k, v in properties.items() if k != CONTEXT_PARAM}
    required = stripped.get("required")
    if isinstance(required, list) and CONTEXT_PARAM in required:
        stripped["required"] = [r for r in required if r != CONTEXT_PARAM]
    return stripped
