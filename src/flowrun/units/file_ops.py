"""file_reader_unit — read files into formatted markdown for prompt context."""

from pathlib import Path
from typing import Any

from flowrun.core.node import Unit
from flowrun.core.resolver import Inputs


def file_reader_unit(name: str, paths: list[str], *, inputs: dict[str, Any] | None = None) -> Unit:
    """Read one or more files and produce a formatted markdown string.

    A ``paths`` input, when bound, replaces the static list. Each file is
    rendered as a markdown section with its path and content. Missing files
    are noted but don't cause failure.
    """

    async def _read(resolved: Inputs) -> dict[str, Any]:
        sections: list[str] = []
        missing: list[str] = []

        for path_str in resolved.resolve("paths", paths):
            p = Path(path_str)
            if p.is_file():
                try:
                    content = p.read_text()
                    sections.append(f"### File: `{path_str}`\n```\n{content}\n```")
                except (OSError, UnicodeDecodeError) as e:
                    sections.append(f"### File: `{path_str}`\n(Error reading: {e})")
                    missing.append(path_str)
            else:
                sections.append(f"### File: `{path_str}`\n(File does not exist)")
                missing.append(path_str)

        return {"output": "\n\n".join(sections), "missing": missing}

    return Unit(name=name, run=_read, description="Read files into markdown", inputs=inputs or {})
