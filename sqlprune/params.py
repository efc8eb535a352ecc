"""
Поиск ссылок на параметры вида :name в тексте SQL.

Литералы в одинарных кавычках пропускаются целиком, поэтому '10:30'
не считается ссылкой на параметр "30". Приведения типов ::type тоже
не являются параметрами.
"""

from __future__ import annotations

import re
from typing import List

# Первая альтернатива поглощает строковые литералы, чтобы внутри них
# ничего не находилось; параметры попадают только во вторую группу.
_PARAM_PATTERN = re.compile(r"'[^']*'|(?<!:):(\w+)")


def scan_parameters(text: str) -> List[str]:
    """
    Извлекает имена параметров, на которые ссылается текст.

    Имена сравниваются без учёта регистра: в результат попадает
    первое встреченное написание в порядке первого появления.

    Args:
        text: Фрагмент SQL

    Returns:
        Список уникальных имён параметров (без двоеточия)
    """
    seen: set[str] = set()
    result: List[str] = []

    for match in _PARAM_PATTERN.finditer(text):
        name = match.group(1)
        if name is None:
            continue
        key = name.lower()
        if key not in seen:
            seen.add(key)
            result.append(name)

    return result


def rewrite_parameter(text: str, name: str, new_name: str) -> str:
    """
    Заменяет ссылки :name на :new_name вне строковых литералов.

    Сравнение имени регистронезависимое; к найденному написанию
    дописывается суффикс нового имени, так что :ID превращается в :ID0.
    """
    key = name.lower()
    suffix = new_name[len(name):] if new_name.lower().startswith(key) else None

    def _replace(match: re.Match) -> str:
        found = match.group(1)
        if found is None or found.lower() != key:
            return match.group(0)
        if suffix is not None:
            return f":{found}{suffix}"
        return f":{new_name}"

    return _PARAM_PATTERN.sub(_replace, text)


__all__ = ["scan_parameters", "rewrite_parameter"]
