"""
Модели JSON-ответов CLI.

Команда report выводит ReportResult через model_dump(mode="json"):
Decimal становится строкой с исходной записью, даты приводятся к ISO-8601.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ReportStats(BaseModel):
    """Счетчики прохода отсечения."""
    conditions_evaluated: int = Field(0, description="Сколько условий было вычислено")
    branches_kept: int = Field(0, description="Условные ветки, оставшиеся в запросе")
    branches_removed: int = Field(0, description="Удаленные условные ветки")
    repeat_blocks_expanded: int = Field(0, description="Раскрытые блоки <a>")
    repeat_blocks_removed: int = Field(0, description="Блоки <a> с пустым списком")


class ReportResult(BaseModel):
    """Итог команды report."""
    sql: str = Field(description="Итоговый SQL без разметки")
    parameters: List[str] = Field(default_factory=list, description="Параметры итогового SQL в порядке появления")
    bind: Dict[str, Any] = Field(default_factory=dict, description="Значения для драйвера по именам из SQL")
    stats: ReportStats = Field(default_factory=ReportStats)


__all__ = ["ReportStats", "ReportResult"]
