"""Transport-agnostic handler for report requests.

The handler returns ``(status, body)`` so any web framework can expose it
with a one-line route.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from .config import Settings
from .errors import InputError, InternalError, InvalidColumnsError
from .narrative import ProgressCallback, TextSummarizer, build_summarizer
from .report import EMPTY_ROWS_MESSAGE, build_report, check_rows
from .validation import validate_columns

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"

Response = Tuple[int, Dict[str, Any]]


def _columns_from_payload(payload: Mapping[str, Any], rows) -> list:
    columns = payload.get("columns")
    if columns is None:
        return [str(key) for key in rows[0]]
    if isinstance(columns, (str, bytes)) or not isinstance(columns, (list, tuple)):
        raise InputError("Lista de colunas inválida")
    return [str(col) for col in columns]


def handle_report_request(
    payload: Any,
    summarizer: Optional[TextSummarizer] = None,
    settings: Optional[Settings] = None,
    progress: Optional[ProgressCallback] = None,
) -> Response:
    """Validate ``payload`` and return the serialised report.

    ``payload`` carries ``rows`` (or ``csvData``) and ``columns``.  When
    ``columns`` is omitted the keys of the first row are used.  Without an
    explicit ``summarizer`` one is built from ``settings``.
    """

    settings = settings or Settings()
    try:
        if not isinstance(payload, Mapping):
            raise InputError(EMPTY_ROWS_MESSAGE)
        rows = payload.get("rows", payload.get("csvData"))
        rows = check_rows(rows)
        columns = _columns_from_payload(payload, rows)

        validation = validate_columns(columns)
        if not validation.is_valid:
            raise InvalidColumnsError(validation)

        report = build_report(
            rows,
            columns,
            summarizer=summarizer or build_summarizer(settings),
            progress=progress,
            sample_size=settings.sample_size,
        )
    except InvalidColumnsError as exc:
        logger.info("Rejected request with missing columns: %s", exc.validation.missing_columns)
        return 422, {"error": str(exc), "validation": exc.validation.to_dict()}
    except InputError as exc:
        logger.info("Rejected request: %s", exc)
        return 400, {"error": str(exc)}
    except InternalError:
        return 500, {"error": INTERNAL_ERROR_MESSAGE}
    except Exception:
        logger.exception("Unexpected failure while handling report request")
        return 500, {"error": INTERNAL_ERROR_MESSAGE}
    return 200, report.to_dict()
