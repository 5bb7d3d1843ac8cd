"""
Значения времени выполнения.

Закрытое размеченное объединение: строка, число, булево значение,
последовательность, запись и null. Все операторы и вывод в текст
работают только через вид значения (ValueKind), без проверок типов Python.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional, Union

from .errors import TypeMismatchError

Number = Union[int, float]


class ValueKind(Enum):
    """Виды значений."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SEQUENCE = "sequence"
    RECORD = "record"
    NULL = "null"


# Виды, которые можно вывести в текст и сравнивать на равенство
SCALAR_KINDS = frozenset({
    ValueKind.STRING,
    ValueKind.NUMBER,
    ValueKind.BOOLEAN,
    ValueKind.NULL,
})


@dataclass(frozen=True)
class Value:
    """
    Значение с явным видом.

    payload зависит от вида:
    - STRING: str
    - NUMBER: int или float
    - BOOLEAN: bool
    - SEQUENCE: tuple[Value, ...]
    - RECORD: неизменяемое отображение str -> Value
    - NULL: None
    """
    kind: ValueKind
    payload: Any = None

    @classmethod
    def string(cls, text: str) -> Value:
        return cls(ValueKind.STRING, text)

    @classmethod
    def number(cls, number: Number) -> Value:
        return cls(ValueKind.NUMBER, number)

    @classmethod
    def boolean(cls, flag: bool) -> Value:
        return TRUE if flag else FALSE

    @classmethod
    def sequence(cls, items) -> Value:
        return cls(ValueKind.SEQUENCE, tuple(items))

    @classmethod
    def record(cls, fields: Mapping[str, Value]) -> Value:
        return cls(ValueKind.RECORD, MappingProxyType(dict(fields)))

    def __repr__(self) -> str:
        return f"Value({self.kind.value}, {self.payload!r})"


TRUE = Value(ValueKind.BOOLEAN, True)
FALSE = Value(ValueKind.BOOLEAN, False)
NULL = Value(ValueKind.NULL, None)


def to_value(obj: Any) -> Value:
    """
    Преобразует обычные данные Python в Value.

    Поддерживаются str, bool, int, float, None, последовательности
    (кроме строк и байтов) и отображения со строковыми ключами.

    Raises:
        TypeError: Для данных, у которых нет представления в шаблонах
    """
    if isinstance(obj, Value):
        return obj
    if obj is None:
        return NULL
    if isinstance(obj, str):
        return Value.string(obj)
    # bool проверяется раньше int: bool является подклассом int
    if isinstance(obj, bool):
        return Value.boolean(obj)
    if isinstance(obj, (int, float)):
        return Value.number(obj)
    if isinstance(obj, Mapping):
        return Value.record({str(key): to_value(item) for key, item in obj.items()})
    if isinstance(obj, Sequence) and not isinstance(obj, (bytes, bytearray)):
        return Value.sequence(to_value(item) for item in obj)
    raise TypeError(f"Cannot use {type(obj).__name__} as a template value")


def format_number(number: Number) -> str:
    """Каноническая десятичная запись без экспоненты: 4, 2.5, -0.125, 0.00001."""
    if isinstance(number, float):
        if number.is_integer():
            return str(int(number))
        # repr даёт кратчайшую точную запись, Decimal раскрывает экспоненту
        return format(Decimal(repr(number)), "f")
    return str(number)


def stringify(value: Value, position: Optional[int] = None) -> str:
    """
    Текстовое представление значения для вывода.

    Raises:
        TypeMismatchError: Для последовательностей, записей и бесконечных
            или неопределённых (nan) чисел
    """
    kind = value.kind
    if kind is ValueKind.STRING:
        return value.payload
    if kind is ValueKind.NUMBER:
        if isinstance(value.payload, float) and not math.isfinite(value.payload):
            raise TypeMismatchError(f"Cannot render a non-finite number ({value.payload!r}) as text", position)
        return format_number(value.payload)
    if kind is ValueKind.BOOLEAN:
        return "true" if value.payload else "false"
    if kind is ValueKind.NULL:
        return "null"
    if kind is ValueKind.SEQUENCE or kind is ValueKind.RECORD:
        raise TypeMismatchError(f"Cannot render a {kind.value} as text", position)
    raise TypeMismatchError(f"Unknown value kind: {kind}", position)


__all__ = [
    "Number",
    "ValueKind",
    "SCALAR_KINDS",
    "Value",
    "TRUE",
    "FALSE",
    "NULL",
    "to_value",
    "format_number",
    "stringify",
]
