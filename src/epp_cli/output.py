"""
CLI Output Formatting

Renders greetings, raw responses and typed responses as table, JSON or XML.
"""

import json
import sys
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from epp_session.models import Response
from epp_session.objects.base import ObjectResponse

_HIDDEN_FIELDS = {"response", "raw_xml", "res_data", "extension", "results"}


def to_data(obj: Any) -> Any:
    """
    Convert a result to plain data.

    Typed responses contribute their code and message plus every public
    property of their class.
    """
    if isinstance(obj, ObjectResponse):
        data = {"code": obj.code, "message": obj.message}
        for cls in reversed(type(obj).__mro__):
            for name, attr in vars(cls).items():
                if isinstance(attr, property) and not name.startswith("_") and name not in _HIDDEN_FIELDS:
                    data[name] = getattr(obj, name)
        if hasattr(obj, "results"):
            data["results"] = obj.results
        return data

    if isinstance(obj, Response):
        return {
            "code": obj.code,
            "message": obj.message,
            "reason": obj.reason,
            "cl_trid": obj.cl_trid,
            "sv_trid": obj.sv_trid,
            "msg_queue": obj.msg_queue,
        }

    if is_dataclass(obj):
        return {k: v for k, v in asdict(obj).items() if k not in _HIDDEN_FIELDS}

    return obj


def format_output(data: Any, format: str = "table", raw_xml: Optional[bytes] = None) -> str:
    """
    Format data for output.

    Args:
        data: Greeting, Response, typed response, dict or list
        format: Output format - table, json, xml
        raw_xml: Raw XML for xml format
    """
    if format == "xml":
        if raw_xml:
            return raw_xml.decode("utf-8", errors="replace")
        return "No XML data available"

    data = to_data(data)

    if format == "json":
        return format_json(data)

    return format_table(data)


def format_json(data: Any) -> str:
    """Format data as JSON."""
    def serialize(obj):
        if is_dataclass(obj):
            return serialize(asdict(obj))
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, (list, tuple)):
            return [serialize(item) for item in obj]
        if isinstance(obj, dict):
            return {k: serialize(v) for k, v in obj.items()}
        return obj

    return json.dumps(serialize(data), indent=2, default=str)


def format_table(data: Any) -> str:
    """Format data as human-readable key/value lines, with a table for list results."""
    if data is None:
        return "No data"

    if isinstance(data, dict):
        lines = [format_dict_table({k: v for k, v in data.items() if k != "results"})]
        if data.get("results"):
            lines.append("")
            lines.append(format_list_table(data["results"]))
        return "\n".join(line for line in lines if line is not None)

    if isinstance(data, list):
        return format_list_table(data)

    return str(data)


def format_dict_table(data: Dict[str, Any]) -> str:
    """Format dictionary as aligned key-value lines, skipping empty values."""
    items = [(k, v) for k, v in data.items() if v is not None and v != []]
    if not items:
        return "No data"

    max_key_width = max(len(str(k)) for k, _ in items)
    lines = []
    for key, value in items:
        key_str = str(key).replace("_", " ").title()
        lines.append(f"{key_str.ljust(max_key_width + 2)}: {format_value(value)}")
    return "\n".join(lines)


def format_list_table(items: List[Any]) -> str:
    """Format list of dataclasses as a column table."""
    if not items:
        return "No results"

    rows = [asdict(item) if is_dataclass(item) else item for item in items]
    if not isinstance(rows[0], dict):
        return "\n".join(str(item) for item in items)

    headers = list(rows[0].keys())
    widths = {h: len(h) for h in headers}
    for row in rows:
        for header in headers:
            widths[header] = max(widths[header], len(format_value(row.get(header), short=True)))

    lines = [
        "  ".join(h.replace("_", " ").title().ljust(widths[h]) for h in headers),
        "  ".join("-" * widths[h] for h in headers),
    ]
    for row in rows:
        lines.append("  ".join(format_value(row.get(h), short=True).ljust(widths[h]) for h in headers))
    return "\n".join(lines)


def format_value(value: Any, short: bool = False) -> str:
    """Format a single value for display."""
    if value is None:
        return ""

    if isinstance(value, bool):
        return "Yes" if value else "No"

    if isinstance(value, datetime):
        if short:
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")

    if isinstance(value, list):
        if short and len(value) > 2:
            return f"{format_value(value[0])}, ... ({len(value)} total)"
        return ", ".join(format_value(v) for v in value)

    if is_dataclass(value):
        data = asdict(value)
        for key in ["name", "id", "address", "type"]:
            if data.get(key):
                return str(data[key])
        return str(data)

    if isinstance(value, dict):
        return ", ".join(f"{k}={v}" for k, v in value.items())

    return str(value)


def print_success(message: str) -> None:
    """Print success message."""
    print(f"SUCCESS: {message}")


def print_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"ERROR: {message}", file=sys.stderr)


def print_info(message: str) -> None:
    """Print info message."""
    print(f"INFO: {message}")


class OutputFormatter:
    """Writes results in the selected format."""

    def __init__(self, format: str = "table", quiet: bool = False):
        self.format = format
        self.quiet = quiet

    def output(self, data: Any, raw_xml: Optional[bytes] = None) -> None:
        print(format_output(data, self.format, raw_xml))

    def success(self, message: str) -> None:
        if not self.quiet:
            print_success(message)

    def error(self, message: str) -> None:
        print_error(message)

    def info(self, message: str) -> None:
        if not self.quiet:
            print_info(message)
