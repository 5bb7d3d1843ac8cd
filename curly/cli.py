from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .config import build_environment
from .errors import ConfigError, CurlyUserError
from .template import compile_template
from .version import tool_version

_LOG = logging.getLogger("curly")


def _setup_logging(verbose: bool) -> None:
    """Один обработчик на stderr; повторные вызовы только меняют уровень."""
    level = logging.DEBUG if verbose or os.environ.get("CURLY_DEBUG") else logging.INFO
    _LOG.setLevel(level)
    if not _LOG.handlers:
        h = logging.StreamHandler(sys.stderr)
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        h.setFormatter(fmt)
        _LOG.addHandler(h)
        _LOG.propagate = False


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="curly",
        description="Render a template with {directives} against key=value data",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument(
        "template",
        nargs="?",
        default="-",
        help="путь к шаблону; без аргумента или '-' шаблон читается из stdin",
    )
    p.add_argument(
        "-i", "--input",
        dest="assignments",
        nargs="+",
        action="extend",
        default=[],
        metavar="KEY=VALUE",
        help='значения окружения: name="John" count=3 tags=[a, b] (перекрывают --env)',
    )
    p.add_argument(
        "--env",
        dest="env_files",
        action="append",
        type=Path,
        default=[],
        metavar="FILE",
        help="YAML-файл с окружением (можно указать несколько)",
    )
    p.add_argument(
        "-o", "--output",
        type=Path,
        metavar="FILE",
        help="записать результат в файл вместо stdout",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help="отладочный вывод в stderr (также через CURLY_DEBUG=1)",
    )
    return p


def _read_template(arg: str) -> str:
    source = "standard input" if arg == "-" else arg
    try:
        if arg == "-":
            return sys.stdin.buffer.read().decode("utf-8")
        return Path(arg).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigError(f"Template {source} is not valid UTF-8: {e.reason} at byte {e.start}")


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(ns.verbose)

    try:
        text = _read_template(ns.template)
        template = compile_template(text)
        environment = build_environment(ns.assignments, ns.env_files)
        result = template.render(environment)
    except CurlyUserError as e:
        sys.stderr.write(f"Error: {str(e).rstrip()}\n")
        return 2
    except OSError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 2

    output: Optional[Path] = ns.output
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result, encoding="utf-8")
        _LOG.debug("Rendered %d characters to %s", len(result), output)
    else:
        sys.stdout.write(result)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
