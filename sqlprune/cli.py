from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .api_schema import ReportResult, ReportStats
from .binder import bind_parameters
from .config import load_bindings, resolve_options
from .errors import SqlPruneError
from .jsonic import dumps as jdumps
from .service import SqlTemplateService
from .version import tool_version


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sqlprune",
        description="SQL template pruner (conditional branches and repeat blocks)",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Общие аргументы для render/report
    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "template",
            metavar="TEMPLATE",
            help="путь к файлу шаблона или - для чтения из stdin",
        )
        sp.add_argument(
            "--params",
            metavar="FILE",
            help="YAML/JSON-файл со значениями параметров (имя -> значение или список)",
        )
        sp.add_argument(
            "--config",
            metavar="FILE",
            help="файл настроек (по умолчанию sqlprune.yaml в текущем каталоге, если есть)",
        )
        sp.add_argument(
            "--tolerate-missing",
            action="store_true",
            help="считать непривязанные параметры равными null вместо ошибки",
        )

    sp_render = sub.add_parser("render", help="Только итоговый SQL (не JSON)")
    add_common(sp_render)

    sp_report = sub.add_parser("report", help="JSON-отчёт: SQL, параметры, значения, статистика")
    add_common(sp_report)

    sp_scan = sub.add_parser("scan", help="Параметры исходного шаблона (JSON)")
    sp_scan.add_argument(
        "template",
        metavar="TEMPLATE",
        help="путь к файлу шаблона или - для чтения из stdin",
    )

    return p


def _setup_logging() -> None:
    if getattr(_setup_logging, "_inited", False):
        return
    _setup_logging._inited = True  # type: ignore[attr-defined]
    level = logging.DEBUG if os.environ.get("SQLPRUNE_DEBUG") else logging.WARNING
    root = logging.getLogger("sqlprune")
    root.setLevel(level)
    if not root.handlers:
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        root.addHandler(h)


def _read_template(arg: str) -> str:
    """
    Читает текст шаблона.

    Поддерживает два формата:
    - Из файла: path/to/query.sql
    - Из stdin: -
    """
    if arg == "-":
        return sys.stdin.read()

    file_path = Path(arg)
    if not file_path.is_file():
        raise ValueError(f"Template file not found: {file_path}")
    try:
        return file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Failed to read template file {file_path}: {e}")


def _bindings(params_arg: Optional[str]) -> Dict[str, Any]:
    if not params_arg:
        return {}
    file_path = Path(params_arg)
    if not file_path.is_file():
        raise ValueError(f"Parameters file not found: {file_path}")
    return load_bindings(file_path)


def _service(ns: argparse.Namespace) -> SqlTemplateService:
    options = resolve_options(
        Path.cwd(),
        Path(ns.config) if ns.config else None,
        tolerate_missing=bool(ns.tolerate_missing),
    )
    return SqlTemplateService(options)


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging()

    try:
        if ns.cmd == "scan":
            template = _read_template(ns.template)
            sys.stdout.write(jdumps({"parameters": SqlTemplateService().scan(template)}))
            return 0

        if ns.cmd in ("render", "report"):
            service = _service(ns)
            values = _bindings(ns.params)
            template = _read_template(ns.template)
            query = service.build(template, values)

            if ns.cmd == "render":
                sys.stdout.write(query.sql)
                return 0

            result = ReportResult(
                sql=query.sql,
                parameters=list(query.parameters),
                bind=bind_parameters(query, service.bindings_for(values)),
                stats=ReportStats(**query.stats.as_dict()),
            )
            sys.stdout.write(jdumps(result.model_dump(mode="json")))
            return 0

    except SqlPruneError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
