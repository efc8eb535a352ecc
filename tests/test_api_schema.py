"""
Tests for report models.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlprune.api_schema import ReportResult, ReportStats


def test_json_dump_of_driver_values():
    result = ReportResult(
        sql="SELECT :a, :b, :d, :t",
        parameters=["a", "b", "d", "t"],
        bind={"a": Decimal("10"), "b": Decimal("1.5"), "d": date(2024, 1, 5), "t": datetime(2024, 1, 5, 8, 30)},
    )
    data = result.model_dump(mode="json")
    assert data["bind"] == {"a": "10", "b": "1.5", "d": "2024-01-05", "t": "2024-01-05T08:30:00"}


def test_stats_default_to_zero():
    data = ReportResult(sql="").model_dump(mode="json")
    assert data == {"sql": "", "parameters": [], "bind": {}, "stats": ReportStats().model_dump()}
    assert data["stats"]["branches_removed"] == 0
