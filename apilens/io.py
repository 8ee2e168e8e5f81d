"""I/O utilities for reading JSON response documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

DOCUMENT_FORMATS = {"json", "jsonl"}


def detect_format(path: Path) -> str:
    """Guess the document format from the extension, then from the first character."""

    suffix = path.suffix.lower()
    if suffix in {".jsonl", ".ndjson"}:
        return "jsonl"
    if suffix == ".json":
        return "json"
    with path.open("r", encoding="utf-8") as handle:
        head = handle.read(1024).lstrip()
    if not head:
        raise ValueError(f"{path} is empty")
    if head[0] in "[{":
        first_line = head.splitlines()[0].strip()
        if head[0] == "{" and first_line.endswith("}") and "\n" in head.strip():
            return "jsonl"
        return "json"
    raise ValueError(f"Unable to detect document format for {path}")


def load_document(path: Path, format: Optional[str] = None) -> Any:
    """Load a JSON document, or a JSONL file as a list of records."""

    if not path.exists():
        raise FileNotFoundError(path)
    if format is not None and format not in DOCUMENT_FORMATS:
        raise ValueError("format must be 'json', 'jsonl', or None")
    detected = format or detect_format(path)

    if detected == "jsonl":
        records: list[Any] = []
        with path.open("r", encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError as exc:
                    raise ValueError(f"Invalid JSON on line {line_number} of {path}: {exc.msg}") from exc
        return records

    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
