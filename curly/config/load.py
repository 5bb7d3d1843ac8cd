"""
Загрузка окружения для рендеринга.

Окружение собирается из YAML-файлов (--env) и присваиваний key=value (-i);
присваивания применяются последними и перекрывают значения из файлов.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..environment import Scope
from ..errors import ConfigError
from ..values import NULL, Value, to_value

_yaml = YAML(typ="safe")

_NUMBER_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")
_DIGITS = "0123456789"


def parse_value(raw: str) -> Value:
    """
    Разбирает значение из присваивания key=value.

    Правила:
    - "текст": строка без кавычек
    - [a, b, [c]]: последовательность, элементы разбираются по тем же правилам
    - пустое значение: null
    - true / false: булево значение
    - начинается с цифры (или -цифры): число
    - всё остальное: строка как есть
    """
    value = raw.strip()

    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return Value.string(value[1:-1])
    if value.startswith("[") and value.endswith("]"):
        return Value.sequence(parse_value(item) for item in _split_items(value[1:-1]))
    if not value:
        return NULL
    if value == "true":
        return Value.boolean(True)
    if value == "false":
        return Value.boolean(False)
    if value[0] in _DIGITS or (value[0] == "-" and value[1:2] and value[1] in _DIGITS):
        if not _NUMBER_RE.fullmatch(value):
            raise ConfigError(f"Failed to parse number: {value!r}")
        return Value.number(float(value) if "." in value else int(value))
    return Value.string(value)


def _split_items(inner: str) -> List[str]:
    """Делит содержимое [...] по запятым верхнего уровня; пустые элементы пропускаются."""
    items: List[str] = []
    depth = 0
    in_string = False
    current: List[str] = []

    for char in inner:
        if in_string:
            current.append(char)
            if char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth < 0:
                raise ConfigError(f"Unbalanced ']' in list value: [{inner}]")
        elif char == "," and depth == 0:
            items.append("".join(current))
            current = []
            continue
        current.append(char)

    if depth != 0 or in_string:
        raise ConfigError(f"Unbalanced list value: [{inner}]")

    items.append("".join(current))
    return [item for item in items if item.strip()]


def parse_assignment(param: str) -> Tuple[str, Value]:
    """
    Разбирает присваивание key=value.

    Raises:
        ConfigError: Нет знака '=' или пустое имя
    """
    if "=" not in param:
        raise ConfigError(
            f"Expected equals sign in assignment: {param!r}. Example: username=\"John\""
        )
    key, raw = param.split("=", 1)
    key = key.strip()
    if not key:
        raise ConfigError(f"Empty key in assignment: {param!r}")
    return key, parse_value(raw)


def load_environment_file(path: Path) -> Dict[str, Value]:
    """
    Читает YAML-файл с окружением.

    Raises:
        ConfigError: Файл не читается, не является YAML-отображением
            или содержит значения без представления в шаблонах
    """
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read environment file {path}: {e}")
    except UnicodeDecodeError as e:
        raise ConfigError(f"Environment file {path} is not valid UTF-8: {e.reason} at byte {e.start}")
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in environment file {path}: {e}")

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Environment file must contain a YAML mapping: {path}")

    result: Dict[str, Value] = {}
    for key, item in raw.items():
        try:
            result[str(key)] = to_value(item)
        except TypeError as e:
            raise ConfigError(f"Unsupported value for key '{key}' in {path}: {e}")
    return result


def build_environment(assignments: Iterable[str] = (), files: Iterable[Path] = ()) -> Scope:
    """
    Собирает корневой скоуп: сначала файлы по порядку, затем присваивания.
    """
    bindings: Dict[str, Value] = {}
    for path in files:
        bindings.update(load_environment_file(path))
    for param in assignments:
        key, value = parse_assignment(param)
        bindings[key] = value
    return Scope(bindings)


__all__ = ["parse_value", "parse_assignment", "load_environment_file", "build_environment"]
