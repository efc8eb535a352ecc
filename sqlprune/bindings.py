from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from .errors import DuplicateBindingError, UnboundVariableError


@dataclass
class ParameterBindings:
    """
    Значения параметров для вычисления условий и раскрытия повторов.

    Имена параметров регистронезависимы: "Salary", "SALARY" и "salary"
    ссылаются на одну и ту же привязку. Исходное написание сохраняется
    для передачи драйверу.

    Значение может быть None, строкой, числом (int, float, Decimal),
    bool, датой/датой-временем или списком скаляров (для блоков <a>).

    tolerate_missing: если True, неизвестный параметр читается как None
    вместо ошибки UnboundVariableError.
    """
    values: Dict[str, Any] = field(default_factory=dict)
    tolerate_missing: bool = False
    _index: Dict[str, Tuple[str, Any]] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self):
        index: Dict[str, Tuple[str, Any]] = {}
        for name, value in self.values.items():
            key = name.lower()
            if key in index:
                raise DuplicateBindingError(name, index[key][0])
            index[key] = (name, value)
        self._index = index

    @classmethod
    def of(cls, bindings: Optional[Mapping[str, Any]] = None, *,
           tolerate_missing: bool = False) -> ParameterBindings:
        """Собирает привязки из произвольного отображения (None дает пустые привязки)."""
        if isinstance(bindings, ParameterBindings):
            if tolerate_missing and not bindings.tolerate_missing:
                return cls(dict(bindings.values), tolerate_missing=True)
            return bindings
        return cls(dict(bindings or {}), tolerate_missing=tolerate_missing)

    def has(self, name: str) -> bool:
        """Проверяет, привязан ли параметр (без учёта регистра)."""
        return name.lower() in self._index

    def resolve(self, name: str) -> Any:
        """
        Возвращает значение параметра.

        Raises:
            UnboundVariableError: Параметр не привязан и режим
                tolerate_missing выключен
        """
        entry = self._index.get(name.lower())
        if entry is None:
            if self.tolerate_missing:
                return None
            raise UnboundVariableError(name)
        return entry[1]

    def canonical_name(self, name: str) -> Optional[str]:
        """Возвращает написание имени, под которым параметр был привязан."""
        entry = self._index.get(name.lower())
        return entry[0] if entry else None

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._index.values())


__all__ = ["ParameterBindings"]
