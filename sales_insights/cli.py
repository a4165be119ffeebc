"""Command line entry point: build a report or check headers of a file."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_settings
from .loader import frame_to_request, load_supported_file
from .narrative import TemplateSummarizer
from .service import handle_report_request
from .validation import validate_columns

logger = logging.getLogger(__name__)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load(path: str):
    return frame_to_request(load_supported_file(path))


def _cmd_report(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    rows, columns = _load(args.input)
    summarizer = TemplateSummarizer() if args.offline else None
    status, body = handle_report_request(
        {"rows": rows, "columns": columns}, summarizer=summarizer, settings=settings
    )
    text = json.dumps(body, ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        logger.info("Report written to %s", args.output)
    else:
        print(text)
    return 0 if status == 200 else 1


def _cmd_validate(args: argparse.Namespace) -> int:
    _, columns = _load(args.input)
    result = validate_columns(columns)
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0 if result.is_valid else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sales-insights",
        description="Gera KPIs e um resumo a partir de uma planilha de vendas.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--log-level", default="WARNING", help="Nível de log (DEBUG, INFO, ...)")
    sub = p.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Gera o relatório JSON")
    report.add_argument("input", help="Arquivo CSV/Excel/JSON ou URL de planilha do Google")
    report.add_argument("--config", default=None, help="Arquivo YAML de configuração")
    report.add_argument("--output", default=None, help="Grava o JSON neste arquivo")
    report.add_argument(
        "--offline", action="store_true", help="Não consulta o serviço de texto; usa o resumo local"
    )
    report.set_defaults(func=_cmd_report)

    validate = sub.add_parser("validate", help="Verifica se as colunas obrigatórias existem")
    validate.add_argument("input", help="Arquivo CSV/Excel/JSON ou URL de planilha do Google")
    validate.set_defaults(func=_cmd_validate)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.func(args)
    except (OSError, ValueError) as exc:
        print(f"Erro: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
