"""
Restore Script Generator - compiles a MappingSet into a standalone
PowerShell restore script.

The generated script re-implements the restore protocol on its own
(elevation, stored-credential lookup or prompt, idempotency check, one
Restore-DriveMapping call per record), so it keeps working on a machine
where mapvault was never installed.

Every value taken from a record is rendered through ps_literal(), the
single place where data becomes PowerShell source.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiofiles.os
from jinja2 import BaseLoader, Environment, StrictUndefined

from ... import __version__
from ...core.exceptions import MappingStoreError
from ...models import MappingSet
from .restore_template import RESTORE_SCRIPT_TEMPLATE

# PowerShell treats all of these as single quotes inside a '...' literal
_PS_SINGLE_QUOTES = frozenset("'\u2018\u2019\u201a\u201b")

GENERATED_HEADER_PREFIX = "# Generated: "


def _quote_segment(segment: str) -> str:
    return "'" + "".join(ch * 2 if ch in _PS_SINGLE_QUOTES else ch for ch in segment) + "'"


def ps_literal(value: Union[str, bool, None]) -> str:
    """
    Render a value as a PowerShell literal that cannot leave its string context.

    Strings become verbatim single-quoted literals (no variable expansion, no
    escape sequences; quote characters are doubled). Control characters are
    spliced in as [char] codes so every literal stays on one line. Booleans
    become $true/$false.
    """
    if isinstance(value, bool):
        return "$true" if value else "$false"
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise TypeError(f"Cannot embed {type(value).__name__} in a restore script")

    if not any(ord(ch) < 32 or ord(ch) == 127 for ch in value):
        return _quote_segment(value)

    parts = []
    segment = []
    for ch in value:
        if ord(ch) < 32 or ord(ch) == 127:
            if segment:
                parts.append(_quote_segment("".join(segment)))
                segment = []
            parts.append(f"[char]0x{ord(ch):02X}")
        else:
            segment.append(ch)
    if segment:
        parts.append(_quote_segment("".join(segment)))
    # [string] first so a leading [char] does not turn '+' into arithmetic
    return "([string]" + " + ".join(parts) + ")"


_ENV = Environment(
    loader=BaseLoader(),
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)
_ENV.filters["ps_literal"] = ps_literal
_TEMPLATE = _ENV.from_string(RESTORE_SCRIPT_TEMPLATE)


class RestoreScriptGenerator:
    """Renders restore scripts; output depends only on the set and the timestamp."""

    def generate(self, mapping_set: MappingSet, generated_at: Optional[datetime] = None) -> str:
        generated_at = generated_at or datetime.now()
        return _TEMPLATE.render(
            records=mapping_set.records,
            generated_at=generated_at.strftime("%Y-%m-%d %H:%M:%S"),
            version=__version__,
        )

    async def write(
        self, mapping_set: MappingSet, path: str, generated_at: Optional[datetime] = None
    ) -> str:
        script = self.generate(mapping_set, generated_at)
        try:
            await aiofiles.os.makedirs(Path(path).parent, exist_ok=True)
            # BOM so Windows PowerShell 5.1 reads non-ASCII share names as UTF-8
            async with aiofiles.open(path, "w", encoding="utf-8-sig", newline="\r\n") as f:
                await f.write(script)
        except OSError as e:
            raise MappingStoreError(f"Cannot write restore script {path}: {e}") from e

        logging.info(f"Wrote restore script for {len(mapping_set)} mapping(s) to {path}")
        return script
