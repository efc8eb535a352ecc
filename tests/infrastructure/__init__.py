"""
Общая тестовая инфраструктура sqlprune.

Modules:
- file_utils: создание файлов в тестах
- cli_utils: запуск CLI в отдельном процессе
"""

from .file_utils import write
from .cli_utils import run_cli, jload

__all__ = ["write", "run_cli", "jload"]
