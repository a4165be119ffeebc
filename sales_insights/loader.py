"""Utilities for ingesting uploaded sales files.

Files are read with every cell kept as text, the same shape a browser CSV
parser hands to the report endpoint: one mapping per line keyed by the
original headers.  Typing is left to :mod:`sales_insights.coercion`.
"""

from __future__ import annotations

import io
import json
import pathlib
import re
from io import BufferedReader
from typing import Any, Dict, List, Optional, Tuple, Union

import chardet
import pandas as pd
import requests

SUPPORTED_FILE_TYPES = {"csv", "excel", "google", "json"}

FileLike = Union[io.BytesIO, BufferedReader]


def _load_csv(data: io.BytesIO, **kwargs) -> pd.DataFrame:
    """Load a CSV file with encoding detection."""

    raw = data.getvalue()
    if not raw:
        raise ValueError("Arquivo CSV vazio.")
    encoding = chardet.detect(raw[:4096])["encoding"] or "utf-8"
    # an ASCII-only prefix says nothing about accents further down
    if encoding.lower() == "ascii":
        encoding = "utf-8"
    data.seek(0)
    kwargs.setdefault("dtype", str)
    kwargs.setdefault("keep_default_na", False)
    kwargs.setdefault("skip_blank_lines", True)
    return pd.read_csv(data, encoding=encoding, **kwargs)


def _load_excel(data: io.BytesIO, **kwargs) -> pd.DataFrame:
    """Load an Excel file from bytes."""

    kwargs.setdefault("dtype", str)
    return pd.read_excel(data, **kwargs)


def _load_json(data: io.BytesIO) -> pd.DataFrame:
    """Load records from JSON.

    Accepts a list of objects or an object holding the list under
    ``rows``, ``csvData`` or ``data``.
    """

    payload = json.loads(data.getvalue().decode("utf-8"))
    if isinstance(payload, dict):
        for key in ("rows", "csvData", "data"):
            if key in payload:
                columns = payload.get("columns")
                return pd.DataFrame(payload[key], columns=columns)
        raise ValueError("JSON sem lista de registros.")
    return pd.DataFrame(payload)


_SHEET_ID = re.compile(r"/spreadsheets/d/([\w-]+)")
_SHEET_GID = re.compile(r"[#&?]gid=(\d+)")


def is_google_sheet_url(location: str) -> bool:
    return location.startswith(("http://", "https://")) and "/spreadsheets/" in location


def sheet_export_url(url: str, gid: Optional[str] = None) -> str:
    """Return the CSV export address of a shared Google Sheet.

    The worksheet is taken from ``gid`` or, failing that, from the ``gid``
    fragment of the browser URL.  Without either the first sheet is exported.
    """

    match = _SHEET_ID.search(url)
    if not is_google_sheet_url(url) or not match:
        raise ValueError("Informe a URL de uma planilha do Google.")
    if gid is None:
        found = _SHEET_GID.search(url)
        gid = found.group(1) if found else None
    export_url = f"https://docs.google.com/spreadsheets/d/{match.group(1)}/export?format=csv"
    return f"{export_url}&gid={gid}" if gid else export_url


def _fetch_sheet(url: str, gid: Optional[str] = None) -> io.BytesIO:
    response = requests.get(sheet_export_url(url, gid), timeout=30)
    response.raise_for_status()
    return io.BytesIO(response.content)


def _detect_source(file: Union[FileLike, str, pathlib.Path]) -> str:
    if isinstance(file, (str, pathlib.Path)):
        candidate_name: Optional[str] = str(file)
    else:
        candidate_name = getattr(file, "name", None)
    if candidate_name is None:
        raise ValueError("Informe a origem ou passe o caminho do arquivo.")
    if isinstance(file, str) and is_google_sheet_url(file):
        return "google"
    suffix = pathlib.PurePath(candidate_name).suffix.lower()
    if suffix in (".csv", ".txt"):
        return "csv"
    if suffix in (".xlsx", ".xlsm", ".xls"):
        return "excel"
    if suffix == ".json":
        return "json"
    raise ValueError("Extensão de arquivo não suportada.")


def _read_bytes(file: Union[FileLike, str, pathlib.Path], source: str, gid: Optional[str]) -> io.BytesIO:
    if source == "google":
        if not isinstance(file, str):
            raise ValueError("Planilhas do Google devem ser informadas pela URL.")
        return _fetch_sheet(file, gid)
    if isinstance(file, (str, pathlib.Path)):
        return io.BytesIO(pathlib.Path(file).read_bytes())
    if isinstance(file, io.BytesIO):
        return file
    return io.BytesIO(file.read())


def load_supported_file(
    file: Union[FileLike, str, pathlib.Path],
    source: Optional[str] = None,
    **kwargs,
) -> pd.DataFrame:
    """Load CSV/Excel/JSON/Google Sheets into a pandas dataframe.

    Parameters
    ----------
    file:
        A file-like object, a local path or a shared Google Sheet URL.
    source:
        Optional explicit source type (``"csv"``, ``"excel"``, ``"json"`` or
        ``"google"``).  When ``None`` the type is derived from the file
        extension or the URL.
    kwargs:
        Passed to the pandas reader.  ``gid`` selects the worksheet of a
        Google Sheet.
    """

    source = (source or _detect_source(file)).lower()
    if source not in SUPPORTED_FILE_TYPES:
        raise ValueError(f"Origem de dados desconhecida: {source}")

    data = _read_bytes(file, source, kwargs.pop("gid", None))
    if source == "json":
        return _load_json(data)
    if source == "excel":
        return _load_excel(data, **kwargs)
    # sheets arrive through their CSV export
    return _load_csv(data, **kwargs)


def frame_to_request(df: pd.DataFrame) -> Tuple[List[Dict[str, Any]], List[str]]:
    """Convert a dataframe into ``(rows, columns)`` for the report pipeline.

    Missing cells become empty strings, which coercion treats as absent.
    """

    columns = [str(col) for col in df.columns]
    frame = df.astype(object).where(pd.notna(df), "")
    frame.columns = columns
    rows = frame.to_dict(orient="records")
    return rows, columns
