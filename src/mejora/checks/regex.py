# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Check runner searching project files for regular expression matches."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import ClassVar, Final

from ..cache import FileHashCache, file_digest, make_cache_key
from ..config import CheckConfig, RegexCheckConfig, RegexPattern
from ..errors import CheckExecutionError
from ..models import FindingInput, RawSnapshot
from .base import CheckContext, CheckRunner

DEFAULT_IGNORE_PATTERNS: Final[tuple[str, ...]] = (
    "**/node_modules/**",
    "**/dist/**",
    "**/.git/**",
)
_LITERAL_PREFIX: Final[re.Pattern[str]] = re.compile(r"^([^*?\[{]+/)")
_BRACE_GROUP: Final[re.Pattern[str]] = re.compile(r"\{([^{}]*)\}")
_GLOB_SPECIALS: Final[frozenset[str]] = frozenset("*?[{")


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives in ``pattern``.

    Nested groups expand innermost first; a group without a comma is kept
    literally.

    >>> expand_braces("src/**/*.{ts,tsx}")
    ['src/**/*.ts', 'src/**/*.tsx']
    """

    match = None
    for candidate in _BRACE_GROUP.finditer(pattern):
        if "," in candidate.group(1):
            match = candidate
            break
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a POSIX glob into a regular expression matched against relative paths.

    ``**`` spans directories, ``*`` and ``?`` stay within one path segment.
    """

    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif pattern.startswith("/**", index) and index + 3 == length:
            parts.append("(?:/.*)?")
            index += 3
        elif pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif char == "*":
            parts.append("[^/]*")
            index += 1
        elif char == "?":
            parts.append("[^/]")
            index += 1
        elif char == "[":
            end = pattern.find("]", index + 1)
            if end == -1:
                parts.append(re.escape(char))
                index += 1
            else:
                body = pattern[index + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append(f"[{body}]")
                index = end + 1
        else:
            parts.append(re.escape(char))
            index += 1
    return re.compile("".join(parts))


def resolve_ignore_patterns(file_patterns: Sequence[str], custom: Sequence[str] | None = None) -> list[str]:
    """Return the ignore globs applied while expanding ``file_patterns``.

    Custom patterns replace the defaults entirely. The defaults are repeated
    under every literal directory prefix of the file patterns, so that
    ``src/**/*.ts`` also skips ``src/node_modules``.
    """

    if custom:
        return list(custom)
    prefixes = [match.group(1) for match in map(_LITERAL_PREFIX.match, file_patterns) if match]
    rerooted = [pattern.replace("**/", prefix, 1) for prefix in prefixes for pattern in DEFAULT_IGNORE_PATTERNS]
    return [*DEFAULT_IGNORE_PATTERNS, *rerooted]


def _is_ignored(relative: str, ignore: Sequence[re.Pattern[str]]) -> bool:
    return any(pattern.fullmatch(relative) for pattern in ignore)


def _walk_base(root: Path, pattern: str) -> Path:
    segments: list[str] = []
    for segment in pattern.split("/")[:-1]:
        if any(char in _GLOB_SPECIALS for char in segment):
            break
        segments.append(segment)
    return root.joinpath(*segments)


def glob_files(root: Path, patterns: Iterable[str], ignore: Iterable[str] = ()) -> list[str]:
    """Return sorted root-relative POSIX paths of files matching ``patterns``.

    Args:
        root: Directory the patterns are relative to.
        patterns: Glob patterns, with ``{a,b}`` brace expansion.
        ignore: Globs excluding files; directories they match are not descended.

    Returns:
        list[str]: Matching files without duplicates.
    """

    ignore_regexes = [glob_to_regex(item) for pattern in ignore for item in expand_braces(pattern)]
    matches: set[str] = set()
    for pattern in patterns:
        for expanded in expand_braces(pattern):
            matcher = glob_to_regex(expanded)
            matches.update(
                relative
                for relative in _walk_files(root, _walk_base(root, expanded), ignore_regexes)
                if matcher.fullmatch(relative)
            )
    return sorted(matches)


def _walk_files(root: Path, base: Path, ignore: Sequence[re.Pattern[str]]) -> Iterator[str]:
    if not base.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(base):
        directory = Path(dirpath)
        dirnames[:] = sorted(
            name for name in dirnames if not _is_ignored((directory / name).relative_to(root).as_posix(), ignore)
        )
        for filename in filenames:
            relative = (directory / filename).relative_to(root).as_posix()
            if not _is_ignored(relative, ignore):
                yield relative


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """Regular expression paired with its reporting metadata."""

    regex: re.Pattern[str]
    rule: str
    message: str | None

    @classmethod
    def from_config(cls, pattern: RegexPattern) -> CompiledPattern:
        return cls(regex=pattern.compile(), rule=pattern.rule_text, message=pattern.message)

    def render(self, match: re.Match[str]) -> str:
        """Return the message reported for ``match``.

        Templates may reference ``{match}``, positional groups (``{0}`` is the
        whole match) and named groups.
        """

        if self.message is None:
            return f"Pattern matched: {match.group(0)}"
        groups = [value or "" for value in match.groups()]
        named = {key: value or "" for key, value in match.groupdict().items()}
        try:
            return self.message.format(match.group(0), *groups, **{**named, "match": match.group(0)})
        except (IndexError, KeyError, ValueError) as exc:
            raise CheckExecutionError(f"Invalid message template {self.message!r}: {exc}") from exc


def scan_lines(lines: Iterable[str], file: str, patterns: Sequence[CompiledPattern]) -> list[FindingInput]:
    """Return one finding for every match of every pattern on every line."""

    items: list[FindingInput] = []
    for line_number, raw_line in enumerate(lines, start=1):
        text = raw_line.rstrip("\r\n")
        for compiled in patterns:
            for match in compiled.regex.finditer(text):
                items.append(
                    FindingInput(
                        file=file,
                        line=line_number,
                        column=match.start() + 1,
                        rule=compiled.rule,
                        message=compiled.render(match),
                    ),
                )
    return items


class RegexCheckRunner(CheckRunner):
    """Report regular expression matches across the configured files."""

    type: ClassVar[str] = "regex"

    def cache_path(self, config: RegexCheckConfig, context: CheckContext) -> Path:
        """Return the per-configuration cache document location."""

        return context.cache_dir(self.type) / f"{make_cache_key(config.model_dump(mode='json'))}.json"

    def run(self, config: CheckConfig, context: CheckContext) -> RawSnapshot:
        if not isinstance(config, RegexCheckConfig):
            raise CheckExecutionError(f"regex runner cannot execute a {config.type!r} check")

        ignore = resolve_ignore_patterns(config.files, config.ignore)
        files = glob_files(context.root, config.files, ignore)
        patterns = [CompiledPattern.from_config(pattern) for pattern in config.patterns]
        cache = FileHashCache(self.cache_path(config, context))
        cache.load()

        def scan(file: str) -> list[FindingInput]:
            path = context.root / file
            digest = file_digest(path)
            if digest is None:
                return []
            cached = cache.lookup(file, digest)
            if cached is not None:
                return cached
            try:
                with path.open(encoding="utf-8") as handle:
                    items = scan_lines(handle, file, patterns)
            except (OSError, UnicodeDecodeError):
                return []
            cache.record(file, digest, items)
            return items

        with ThreadPoolExecutor(max_workers=config.concurrency) as executor:
            results = list(executor.map(scan, files))

        cache.save()
        return RawSnapshot(items=[item for items in results for item in items])

    def setup(self, context: CheckContext) -> None:
        context.cache_dir(self.type).mkdir(parents=True, exist_ok=True)


__all__ = [
    "DEFAULT_IGNORE_PATTERNS",
    "CompiledPattern",
    "RegexCheckRunner",
    "expand_braces",
    "glob_files",
    "glob_to_regex",
    "resolve_ignore_patterns",
    "scan_lines",
]
