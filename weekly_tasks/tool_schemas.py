"""Static tool registry: JSON schemas for every ``/tool:<name>`` route."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

TOOLS_JSON_PATH = Path(__file__).with_name("tool_schemas.json")


class ToolSchemaError(RuntimeError):
    """Raised when tool schema definitions are invalid or unavailable."""


def load_tool_definitions(path: Path | None = None) -> list[dict[str, Any]]:
    tool_path = path or TOOLS_JSON_PATH
    try:
        data = json.loads(tool_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ToolSchemaError(f"Tool definition file not found: {tool_path}") from exc
    except OSError as exc:
        raise ToolSchemaError(f"Unable to read tool definitions: {tool_path}") from exc
    except json.JSONDecodeError as exc:
        raise ToolSchemaError(f"Tool definitions JSON is invalid: {exc}") from exc
    if not isinstance(data, list):
        raise ToolSchemaError("Tool definitions must be a JSON array.")
    validate_tool_definitions(data)
    return data


def validate_tool_definitions(tools: list[Any]) -> None:
    """Check each definition is a uniquely named function tool.

    ``parameters`` must be an object schema whose ``required`` names are all
    declared under ``properties``.
    """
    seen: set[str] = set()
    for index, tool in enumerate(tools):
        function = tool.get("function") if isinstance(tool, dict) else None
        if not isinstance(function, dict) or tool.get("type") != "function":
            raise ToolSchemaError(
                f"Tool at index {index} must be a function tool object."
            )
        name = function.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ToolSchemaError(f"Tool at index {index} must define a name.")
        if name in seen:
            raise ToolSchemaError(f"Tool '{name}' is defined more than once.")
        seen.add(name)

        parameters = function.get("parameters")
        if not isinstance(parameters, dict):
            raise ToolSchemaError(f"Tool '{name}' must include parameters object.")
        properties = parameters.get("properties", {})
        undeclared = sorted(set(parameters.get("required", [])) - set(properties))
        if undeclared:
            raise ToolSchemaError(
                f"Tool '{name}' requires undeclared parameters: "
                + ", ".join(undeclared)
            )


def tool_names(tools: list[dict[str, Any]]) -> list[str]:
    return [tool["function"]["name"] for tool in tools]


def check_registered_tools(
    tools: list[dict[str, Any]], registered: Iterable[str]
) -> None:
    """Fail when the schemas and the registered tool routes disagree."""
    declared = set(tool_names(tools))
    registered = set(registered)
    problems = []
    if declared - registered:
        problems.append(
            "no route for " + ", ".join(sorted(declared - registered))
        )
    if registered - declared:
        problems.append(
            "no schema for " + ", ".join(sorted(registered - declared))
        )
    if problems:
        raise ToolSchemaError("Tool registry mismatch: " + "; ".join(problems))
