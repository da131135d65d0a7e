"""
CSV <-> JSON conversion core.

Responsibilities:
- CSV text -> records (naive comma split, or RFC 4180 quoted fields on request)
- JSON text -> records, validated as a non-empty array of objects
- records -> CSV text over the union of all keys
- mode dispatch with uniform error reporting
"""

from __future__ import annotations

import csv
import io
import json
import math
import re
from typing import Any, Dict, List

from . import rules
from .logger import get_logger
from .models import ConversionError, ConvertResult

log = get_logger(__name__)

Record = Dict[str, Any]

_LINE_SPLIT = re.compile(r"\r\n|\n")
_NEEDS_QUOTING = (rules.DELIMITER, rules.QUOTE, "\n", "\r")


class FormatError(ValueError):
    """Input text does not have the CSV or JSON shape a conversion needs."""


class EmptyInputError(ValueError):
    """Conversion was requested with blank input."""


# --- CSV -> records ---


def _naive_rows(text: str) -> List[List[str]]:
    return [line.split(rules.DELIMITER) for line in _LINE_SPLIT.split(text)]


def _quoted_rows(text: str) -> List[List[str]]:
    reader = csv.reader(
        io.StringIO(text, newline=""),
        delimiter=rules.DELIMITER,
        quotechar=rules.QUOTE,
        skipinitialspace=True,
    )
    try:
        # a blank line comes back as [], the naive split gives [""]
        return [row or [""] for row in reader]
    except csv.Error as exc:
        raise FormatError(f"Malformed quoted CSV: {exc}") from exc


def parse_csv(text: str, quoted: bool = False) -> List[Record]:
    """
    Parse CSV text into records keyed by the header row.

    Every value is a trimmed string. With quoted=False fields are split on
    every comma; with quoted=True double-quoted fields may carry commas,
    doubled quotes and line breaks.
    """
    text = text.strip()
    rows = _quoted_rows(text) if quoted else _naive_rows(text)
    if len(rows) < 2:
        raise FormatError(rules.MSG_CSV_TOO_SHORT)

    headers = [h.strip() for h in rows[0]]
    if any(not h for h in headers):
        raise FormatError(rules.MSG_CSV_EMPTY_HEADER)

    records: List[Record] = []
    for index, row in enumerate(rows[1:]):
        values = [v.strip() for v in row]
        if len(values) != len(headers):
            raise FormatError(
                rules.MSG_CSV_ROW_WIDTH.format(
                    line=index + 2, actual=len(values), expected=len(headers)
                )
            )
        record: Record = {}
        for header, value in zip(headers, values):
            record[header] = value or ""
        records.append(record)
    return records


# --- JSON -> records ---


def _reject_constant(name: str) -> Any:
    raise FormatError(f"Unexpected token {name}, not valid JSON")


def parse_json(text: str) -> List[Record]:
    """Parse JSON text that must hold a non-empty array of objects."""
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except FormatError:
        raise
    except json.JSONDecodeError as exc:
        raise FormatError(f"{exc.msg}: line {exc.lineno} column {exc.colno}") from exc
    except RecursionError as exc:
        raise FormatError("JSON is nested too deeply") from exc
    except ValueError as exc:
        # valid syntax the decoder still refuses, e.g. oversized integer literals
        raise FormatError(str(exc)) from exc

    if not isinstance(data, list):
        raise FormatError(rules.MSG_JSON_NOT_ARRAY)
    if not data:
        raise FormatError(rules.MSG_JSON_EMPTY)

    records: List[Record] = []
    for item in data:
        if isinstance(item, dict):
            records.append(item)
        elif isinstance(item, list):
            # arrays count as objects keyed by position
            records.append({str(i): v for i, v in enumerate(item)})
        else:
            raise FormatError(rules.MSG_JSON_NOT_OBJECTS)
    return records


# --- records -> CSV ---


def _format_float(value: float) -> str:
    """Render a float the way JavaScript's Number#toString does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr gives the shortest round-tripping digits; only the layout differs
    mantissa, _, exp = repr(abs(value)).partition("e")
    whole, _, frac = mantissa.partition(".")
    digits = whole + frac
    point = len(whole) + int(exp or 0)

    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    digits = stripped.rstrip("0")
    k = len(digits)

    if k <= point <= rules.FLOAT_MAX_PLAIN_DIGITS:
        text = digits + "0" * (point - k)
    elif 0 < point <= rules.FLOAT_MAX_PLAIN_DIGITS:
        text = digits[:point] + "." + digits[point:]
    elif rules.FLOAT_MIN_PLAIN_POINT < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        e = point - 1
        head = digits if k == 1 else digits[0] + "." + digits[1:]
        text = f"{head}e{'+' if e >= 0 else '-'}{abs(e)}"
    return sign + text


def stringify(value: Any) -> str:
    """Canonical text for one cell value. None renders as an empty cell."""
    if value is None:
        return ""
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def escape_cell(text: str) -> str:
    if any(ch in text for ch in _NEEDS_QUOTING):
        return rules.QUOTE + text.replace(rules.QUOTE, rules.QUOTE * 2) + rules.QUOTE
    return text


def unified_headers(records: List[Record]) -> List[str]:
    """Union of record keys in first-seen order."""
    seen: Dict[str, None] = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    return list(seen)


def _cell(record: Record, header: str) -> str:
    if header not in record:
        return ""
    return escape_cell(stringify(record[header]))


def serialize_csv(records: List[Record]) -> str:
    headers = unified_headers(records)
    lines = [rules.DELIMITER.join(escape_cell(h) for h in headers)]
    for record in records:
        lines.append(rules.DELIMITER.join(_cell(record, h) for h in headers))
    return rules.LINE_TERMINATOR.join(lines)


# --- dispatch ---


def _run(mode: str, text: str, quoted: bool) -> str:
    if not text.strip():
        raise EmptyInputError(rules.MSG_EMPTY_INPUT)

    if mode == rules.CSV2JSON:
        records = parse_csv(text, quoted=quoted)
        output = json.dumps(records, indent=rules.JSON_INDENT, ensure_ascii=False)
    else:
        records = parse_json(text)
        output = serialize_csv(records)

    log.info("%s converted %d records", mode, len(records))
    return output


def convert(mode: str, text: str, quoted: bool = False) -> ConvertResult:
    """
    Run one conversion and report the outcome as a value.

    Blank input gives the friendly empty-input message with no details.
    Any format problem gives "Conversion failed" with the parser message as
    details. A failed result never carries output.
    """
    if mode not in rules.MODES:
        raise ValueError(f"Unknown conversion mode: {mode!r}")
    filename = rules.DOWNLOAD_FILENAMES[mode]

    try:
        output = _run(mode, text, quoted)
    except EmptyInputError as exc:
        log.info("%s skipped: %s", mode, exc)
        return ConvertResult(error=ConversionError(message=str(exc)), filename=filename)
    except FormatError as exc:
        log.warning("%s failed: %s", mode, exc)
        return ConvertResult(
            error=ConversionError(message=rules.MSG_CONVERSION_FAILED, details=str(exc)),
            filename=filename,
        )

    return ConvertResult(output=output, filename=filename)
