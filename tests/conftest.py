from pathlib import Path

import pytest

from tests.infrastructure.file_utils import write


@pytest.fixture
def tmpproj(tmp_path: Path):
    """Каталог с шаблоном, файлом параметров и без sqlprune.yaml."""
    root = tmp_path
    write(
        root / "emp.sql",
        "SELECT * FROM emp WHERE 1=1"
        "<if> AND dept = :dept</if>"
        "<if c=\"$ids\"> AND id IN <a pre=\"(\" sep=\",\" post=\")\">:id</a></if>",
    )
    write(root / "params.yaml", "dept: 10\nids: [7, 8]\nid: [7, 8]\n")
    return root


@pytest.fixture(autouse=True)
def _no_debug_logging(monkeypatch):
    # отладочный вывод не должен попадать в stderr CLI-тестов
    monkeypatch.delenv("SQLPRUNE_DEBUG", raising=False)
