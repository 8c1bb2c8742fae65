# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging helpers with optional colour and emoji support."""

from __future__ import annotations

from rich.text import Text

from .console import detect_tty, get_console_manager

ANSI = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "blue": "\033[34;1m",
    "cyan": "\033[36;1m",
    "red": "\033[31;1m",
    "green": "\033[32;1m",
    "yellow": "\033[33;1m",
}


def colorize(text: str, code: str, enable: bool) -> str:
    """Apply ANSI colour codes to ``text`` when colouring is enabled.

    Args:
        text: Message text that may be colourised.
        code: ANSI colour identifier from :data:`ANSI`.
        enable: Flag indicating whether colour output is requested.

    Returns:
        str: Colourised text when colouring is enabled and stdout is a TTY;
        otherwise the text unchanged.
    """

    if not enable or not detect_tty():
        return text
    return f"{ANSI.get(code, '')}{text}{ANSI['reset']}"


def emoji(symbol: str, enable: bool) -> str:
    """Return *symbol* when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _print_line(msg: str, *, style: str | None, use_emoji: bool, use_color: bool | None) -> None:
    color_enabled = detect_tty(stderr=True) if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def start(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Announce the start of a long-running step."""

    _print_line(f"{emoji('⏳ ', use_emoji)}{msg}", style="blue", use_emoji=use_emoji, use_color=use_color)


def success(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _print_line(f"{emoji('✅ ', use_emoji)}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    _print_line(f"{emoji('⚠️ ', use_emoji)}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Emit an error message."""

    _print_line(f"{emoji('❌ ', use_emoji)}{msg}", style="red", use_emoji=use_emoji, use_color=use_color)


__all__ = ["ANSI", "colorize", "emoji", "fail", "start", "success", "warn"]
