"""
Окружение выполнения шаблона.

Корневой скоуп строится из данных вызывающей стороны и не изменяется.
Цикл #for создаёт дочерний скоуп с одной привязкой на каждую итерацию;
поиск идёт от дочернего скоупа к родительскому.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterator, Optional

from .values import Value, to_value


class Scope:
    """
    Неизменяемый набор привязок с обратной ссылкой на родителя.

    Родитель используется только для поиска, никогда для записи.
    """

    __slots__ = ("_bindings", "_parent")

    def __init__(self, bindings: Mapping[str, Value], parent: Optional[Scope] = None):
        self._bindings = MappingProxyType(dict(bindings))
        self._parent = parent

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> Scope:
        """Строит корневой скоуп из обычного словаря Python."""
        return cls({str(name): to_value(obj) for name, obj in mapping.items()})

    @property
    def parent(self) -> Optional[Scope]:
        return self._parent

    @property
    def root(self) -> Scope:
        scope = self
        while scope._parent is not None:
            scope = scope._parent
        return scope

    def child(self, name: str, value: Value) -> Scope:
        """Новый скоуп, затеняющий одно имя."""
        return Scope({name: value}, parent=self)

    def lookup(self, name: str) -> Optional[Value]:
        """Ищет имя по цепочке скоупов; None, если имя не определено."""
        scope: Optional[Scope] = self
        while scope is not None:
            value = scope._bindings.get(name)
            if value is not None:
                return value
            scope = scope._parent
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def names(self) -> Iterator[str]:
        """Все видимые имена: сначала свои, затем родительские."""
        seen = set()
        scope: Optional[Scope] = self
        while scope is not None:
            for name in scope._bindings:
                if name not in seen:
                    seen.add(name)
                    yield name
            scope = scope._parent

    def __repr__(self) -> str:
        depth = 0
        scope = self._parent
        while scope is not None:
            depth += 1
            scope = scope._parent
        return f"Scope({sorted(self._bindings)}, depth={depth})"


__all__ = ["Scope"]
