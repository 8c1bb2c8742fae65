# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rendering of baselines and run results for humans and machines."""

from __future__ import annotations

from .markdown import generate_markdown_report
from .output import format_duration, format_json_output, format_text_output

__all__ = [
    "format_duration",
    "format_json_output",
    "format_text_output",
    "generate_markdown_report",
]
