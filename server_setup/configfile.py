"""Idempotent line-level edits of configuration files.

Each edit is a :class:`Directive` naming the desired value of a key. The
dialect knows how such a line looks, which part of the file the key lives in,
and how to render it. Applying a directive finds the key whatever its current
value or comment state, so reapplying it to its own output changes nothing.
"""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Tuple, Union

from server_setup.utils import SetupError, log_action, log_debug


class ConfigPatchError(SetupError):
    """Raised when a directive has nowhere to go in the target file."""


@dataclass(frozen=True)
class Directive:
    key: str
    value: str
    section: Optional[str] = None


class SshdDialect:
    """``Key value`` lines as used by sshd_config.

    Only the global part of the file is edited; everything from the first
    active ``Match`` block on is left alone.
    """

    _match_block = re.compile(r'^\s*Match\s', re.IGNORECASE)

    def pattern(self, key: str) -> Pattern:
        """Match the key as an active or commented-out line."""
        return re.compile(
            rf'^\s*(?P<comment>#\s*)?{re.escape(key)}(?:\s+|\s*=\s*)\S',
            re.IGNORECASE,
        )

    def render(self, directive: Directive) -> str:
        return f"{directive.key} {directive.value}"

    def scope(self, lines: List[str], directive: Directive) -> Tuple[int, int]:
        """Line range before the first Match block."""
        for index, line in enumerate(lines):
            if self._match_block.match(line):
                return 0, index
        return 0, len(lines)


class IniDialect:
    """``key = value`` lines grouped under ``[section]`` headers."""

    _header = re.compile(r'^\s*\[(?P<name>[^\]]+)\]')

    def pattern(self, key: str) -> Pattern:
        return re.compile(rf'^\s*(?P<comment>[#;]\s*)?{re.escape(key)}\s*=')

    def render(self, directive: Directive) -> str:
        return f"{directive.key} = {directive.value}"

    def scope(self, lines: List[str], directive: Directive) -> Tuple[int, int]:
        """Line range of the directive's section, header excluded."""
        start = None
        for index, line in enumerate(lines):
            header = self._header.match(line)
            if not header:
                continue
            if start is not None:
                return start, index
            if header.group('name').strip() == directive.section:
                start = index + 1
        if start is None:
            raise ConfigPatchError(f"Section [{directive.section}] not found for '{directive.key}'")
        return start, len(lines)


SSHD = SshdDialect()
INI = IniDialect()

Dialect = Union[SshdDialect, IniDialect]


def apply_directive(lines: List[str], directive: Directive, dialect: Dialect) -> None:
    """Set ``directive`` in ``lines`` in place.

    The first active line for the key wins, then the first commented-out one.
    A key that appears in neither form is added at the end of its scope.
    """
    start, end = dialect.scope(lines, directive)
    pattern = dialect.pattern(directive.key)
    target = None
    for index in range(start, end):
        match = pattern.match(lines[index])
        if not match:
            continue
        if not match.group('comment'):
            target = index
            break
        if target is None:
            target = index

    rendered = dialect.render(directive)
    if target is not None:
        lines[target] = rendered
        return

    insert_at = end
    while insert_at > start and not lines[insert_at - 1].strip():
        insert_at -= 1
    log_debug(f"'{directive.key}' not present, inserting at line {insert_at + 1}")
    lines.insert(insert_at, rendered)


def apply_directives(text: str, directives: Iterable[Directive], dialect: Dialect) -> str:
    """Return ``text`` with every directive applied in order."""
    lines = text.splitlines()
    for directive in directives:
        apply_directive(lines, directive, dialect)
    result = "\n".join(lines)
    if lines and (not text or text.endswith("\n")):
        result += "\n"
    return result


def patch_file(path: Union[str, Path], directives: Iterable[Directive], dialect: Dialect) -> bool:
    """Apply directives to the file at ``path``; return True if it changed."""
    path = Path(path)
    original = path.read_text()
    updated = apply_directives(original, directives, dialect)
    if updated == original:
        log_debug(f"{path} already up to date")
        return False
    path.write_text(updated)
    log_action(f"Updated {path}")
    return True
