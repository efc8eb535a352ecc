from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import SqlPruneError

_LOG = logging.getLogger(__name__)

_yaml = YAML(typ="safe")

OPTIONS_FILE = "sqlprune.yaml"


class ConfigLoadError(SqlPruneError):
    """Ошибка загрузки конфигурации или файла параметров с указанием пути поля."""
    pass


@dataclass(frozen=True)
class PruneOptions:
    """
    Настройки конвейера отсечения.

    tolerate_missing: непривязанный параметр читается как null вместо
        ошибки (и в условиях, и при передаче параметров драйверу).
    """
    tolerate_missing: bool = False


def _err(path: str, msg: str) -> ConfigLoadError:
    _LOG.debug("RAISE at %s: %s", path, msg)
    return ConfigLoadError(f"{path}: {msg}")


def _read_yaml(path: Path) -> Any:
    try:
        return _yaml.load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigLoadError(f"{path}: cannot read file: {e}") from e
    except YAMLError as e:
        raise ConfigLoadError(f"{path}: invalid YAML: {e}") from e


def load_options(path: Path) -> PruneOptions:
    """
    Загружает настройки из YAML-файла.

    Неизвестные ключи и значения неверного типа считаются ошибкой.
    Пустой файл дает настройки по умолчанию.
    """
    data = _read_yaml(path)
    if data is None:
        return PruneOptions()
    if not isinstance(data, dict):
        raise _err(str(path), f"expected a mapping, got {type(data).__name__}")

    known = {f.name: f for f in fields(PruneOptions)}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        field_path = f"{path}:{key}"
        if key not in known:
            raise _err(field_path, f"unknown option (expected one of: {', '.join(sorted(known))})")
        if not isinstance(value, bool):
            raise _err(field_path, f"expected bool, got {type(value).__name__}")
        values[key] = value

    return PruneOptions(**values)


def find_options(root: Path) -> PruneOptions:
    """Настройки из sqlprune.yaml в каталоге root или значения по умолчанию."""
    path = root / OPTIONS_FILE
    if path.is_file():
        _LOG.debug("Loading options from %s", path)
        return load_options(path)
    return PruneOptions()


def load_bindings(path: Path) -> Dict[str, Any]:
    """
    Загружает привязки параметров из YAML- или JSON-файла.

    Файл содержит отображение имя -> значение, где значение: скаляр или список
    скаляров. Даты YAML становятся date/datetime, дробные числа
    читаются как Decimal, чтобы не терять точность записи.
    """
    data = _read_yaml(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _err(str(path), f"expected a mapping of parameter values, got {type(data).__name__}")

    result: Dict[str, Any] = {}
    for name, value in data.items():
        field_path = f"{path}:{name}"
        if not isinstance(name, str):
            raise _err(field_path, "parameter name must be a string")
        if isinstance(value, list):
            result[name] = [_scalar(item, f"{field_path}[{i}]") for i, item in enumerate(value)]
        else:
            result[name] = _scalar(value, field_path)

    return result


def _scalar(value: Any, path: str) -> Any:
    if isinstance(value, float):
        if not math.isfinite(value):
            raise _err(path, f"non-finite number {value!r}")
        return Decimal(repr(value))
    if value is None or isinstance(value, (str, int, date)):
        return value
    raise _err(path, f"unsupported value of type {type(value).__name__}")


def resolve_options(root: Path, config_path: Optional[Path] = None,
                    tolerate_missing: Optional[bool] = None) -> PruneOptions:
    """
    Итоговые настройки: явный файл или sqlprune.yaml, поверх них флаги CLI.
    """
    options = load_options(config_path) if config_path else find_options(root)
    if tolerate_missing:
        options = PruneOptions(tolerate_missing=True)
    return options


__all__ = [
    "ConfigLoadError",
    "PruneOptions",
    "OPTIONS_FILE",
    "load_options",
    "find_options",
    "load_bindings",
    "resolve_options",
]
