"""Sales analytics: KPIs and a narrative summary from loosely typed rows."""

from .chat import DashboardAssistant
from .errors import (
    InputError,
    InternalError,
    InvalidColumnsError,
    NarrativeUnavailable,
    SalesInsightsError,
)
from .fields import CanonicalField, resolve_field
from .kpis import KPISet
from .loader import frame_to_request, load_supported_file
from .narrative import RemoteSummarizer, ReportStage, TemplateSummarizer, TextSummarizer
from .report import Report, build_report, compute_kpis
from .service import handle_report_request
from .validation import ValidationResult, validate_columns

__all__ = [
    "CanonicalField",
    "DashboardAssistant",
    "InputError",
    "InternalError",
    "InvalidColumnsError",
    "KPISet",
    "NarrativeUnavailable",
    "RemoteSummarizer",
    "Report",
    "ReportStage",
    "SalesInsightsError",
    "TemplateSummarizer",
    "TextSummarizer",
    "ValidationResult",
    "build_report",
    "compute_kpis",
    "frame_to_request",
    "handle_report_request",
    "load_supported_file",
    "resolve_field",
    "validate_columns",
]
