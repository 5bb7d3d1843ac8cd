"""
Utilities for working with CLI in tests.
"""

import os
import subprocess
import sys
from pathlib import Path
from typing import Optional

# Repository root, so that `python -m curly.cli` works without installation
REPO_ROOT = Path(__file__).resolve().parents[2]


def run_cli(root: Path, *args: str, stdin: Optional[str] = None) -> subprocess.CompletedProcess:
    """
    Runs curly.cli with specified arguments in the given directory.

    Args:
        root: Working directory for command execution
        *args: Command line arguments for curly.cli
        stdin: Text passed to the process standard input

    Returns:
        CompletedProcess with execution results
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    env.pop("CURLY_DEBUG", None)
    return subprocess.run(
        [sys.executable, "-m", "curly.cli", *args],
        cwd=root, env=env, input=stdin, capture_output=True, text=True, encoding="utf-8"
    )


__all__ = ["run_cli", "REPO_ROOT"]
