"""
Unified test infrastructure for curly.

Modules:
- file_utils: Utilities for creating files and directories
- cli_utils: Running the CLI in a subprocess
"""

from .file_utils import write
from .cli_utils import run_cli

__all__ = [
    "write",
    "run_cli",
]
