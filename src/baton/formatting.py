"""Pretty-print support for conversation output.

Uses rich library for formatted terminal output.
All functions accept their target object and print to a rich Console.

To avoid circular imports, this module does NOT import domain models
at module level. Functions access object attributes dynamically.
"""
from __future__ import annotations

import json
from typing import Any

from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

# Brighter markdown theme for dark terminals
_MARKDOWN_THEME = Theme({
    "markdown.h1": "bold bright_white underline",
    "markdown.h2": "bold bright_white",
    "markdown.code": "bold white on grey11",
    "markdown.code_block": "white on grey11",
    "markdown.link": "bright_cyan underline",
    "markdown.strong": "bold bright_white",
    "markdown.em": "italic bright_white",
})

_ROLE_STYLES: dict[str, str] = {
    "system": "yellow",
    "user": "blue",
    "assistant": "green",
    "tool": "cyan",
}


def _make_console(file: Any = None) -> Console:
    """Create a Console, optionally writing to a file-like object."""
    if file is not None:
        return Console(file=file, force_terminal=True, width=100, theme=_MARKDOWN_THEME)
    return Console(theme=_MARKDOWN_THEME)


def _format_arguments(raw: Any) -> str:
    """Render tool-call arguments as ``key=value`` pairs."""
    try:
        args = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError:
        return str(raw)
    if not isinstance(args, dict):
        return str(args)
    return ", ".join(f"{k}={v!r}" for k, v in args.items())


def _message_panel(message: dict, *, abbreviate: bool) -> Panel:
    role = message.get("role", "?")
    content = message.get("content") or ""
    if abbreviate and len(content) > 200:
        content = content[:197] + "..."

    body_parts: list[Any] = []
    if content:
        body_parts.append(Markdown(content) if role == "assistant" else Text(content))
    for tc in message.get("tool_calls") or []:
        function = tc.get("function", {})
        call_text = Text()
        call_text.append(function.get("name", ""), style="bold cyan")
        call_text.append("(", style="dim")
        call_text.append(_format_arguments(function.get("arguments", "")), style="white")
        call_text.append(")", style="dim")
        body_parts.append(call_text)
    if not body_parts:
        body_parts.append(Text("(empty message)", style="dim"))

    if role == "assistant":
        title = message.get("sender") or "Assistant"
    elif role == "tool":
        title = f"Tool: {message.get('name', '?')}"
    else:
        title = role.capitalize()
    body: Any = Group(*body_parts) if len(body_parts) > 1 else body_parts[0]
    return Panel(body, title=f"[bold]{title}[/bold]", border_style=_ROLE_STYLES.get(role, "white"))


def pprint_messages(messages: list[dict], *, abbreviate: bool = False, file: Any = None) -> None:
    """Pretty-print a list of conversation messages.

    Assistant panels are titled with the message's ``sender``; tool calls
    are rendered as ``name(key=value, ...)``.

    Args:
        messages: Messages in wire format.
        abbreviate: If True, truncate long text. Default False (show full).
        file: Optional file-like object for output (used in tests).
    """
    console = _make_console(file)
    for message in messages:
        console.print(_message_panel(message, abbreviate=abbreviate))


def pprint_response(response: Any, *, abbreviate: bool = False, file: Any = None) -> None:
    """Pretty-print a Response: its messages, final agent and context."""
    console = _make_console(file)
    pprint_messages(response.messages, abbreviate=abbreviate, file=file)

    agent = getattr(response, "agent", None)
    footer = Text()
    footer.append("agent: ", style="dim")
    footer.append(agent.name if agent is not None else "-", style="bold")
    context = getattr(response, "context_variables", None) or {}
    if context:
        footer.append("  context: ", style="dim")
        footer.append(", ".join(sorted(context)), style="white")
    console.print(footer)
