"""Ready-made units wrapping common collaborators."""

from flowrun.units.claude import claude_unit
from flowrun.units.file_ops import file_reader_unit
from flowrun.units.shell import shell_unit

__all__ = ["claude_unit", "file_reader_unit", "shell_unit"]
