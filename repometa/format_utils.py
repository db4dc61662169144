"""
Output format utilities for repometa CLI commands.

Turns records (dicts or objects with to_dict()) into JSONL, JSON, CSV,
TSV or YAML text.
"""

import csv
import io
import json
import os
from typing import Any, Dict, Iterable, Iterator, List, Optional

import yaml

FORMATS = ('json', 'jsonl', 'csv', 'tsv', 'yaml')


def to_record(item: Any) -> Dict[str, Any]:
    """Domain object or dict to a plain dict."""
    if hasattr(item, 'to_dict'):
        return item.to_dict()
    return item


def format_output(data: Iterable[Any], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Records to format
        format: Output format (json, jsonl, csv, tsv, yaml)
        fields: Optional list of fields to include (for CSV/TSV)

    Yields:
        Formatted strings for output
    """
    records = (to_record(item) for item in data)
    if format == "jsonl":
        for record in records:
            yield json.dumps(record, ensure_ascii=False)
    elif format == "json":
        yield json.dumps(list(records), ensure_ascii=False, indent=2)
    elif format == "yaml":
        yield yaml.dump(list(records), default_flow_style=False, allow_unicode=True, sort_keys=False)
    elif format == "csv":
        yield from format_delimited(records, fields, ',')
    elif format == "tsv":
        yield from format_delimited(records, fields, '\t')
    else:
        raise ValueError(f"Unknown format: {format}")


def format_delimited(data: Iterable[Dict[str, Any]], fields: Optional[List[str]], delimiter: str) -> Iterator[str]:
    """
    Format data as CSV or TSV with a header row.

    Without fields, columns are the union of all flattened keys in
    first-seen order.
    """
    rows = [flatten_dict(item) for item in data]
    if not rows:
        return

    if fields is None:
        seen: Dict[str, None] = {}
        for row in rows:
            for key in row:
                seen.setdefault(key, None)
        fields = list(seen)

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, delimiter=delimiter, extrasaction='ignore')
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    yield output.getvalue()


def flatten_dict(d: Dict[str, Any], parent_key: str = '', sep: str = '.') -> Dict[str, Any]:
    """
    Flatten a nested dictionary.

    Example:
        {'a': {'b': 1, 'c': 2}} -> {'a.b': 1, 'a.c': 2}
    """
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k
        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep=sep).items())
        elif isinstance(v, list):
            items.append((new_key, ', '.join(str(item) for item in v)))
        else:
            items.append((new_key, v))
    return dict(items)


def get_format_from_env(default: str = 'jsonl') -> str:
    """
    Get output format from the REPOMETA_FORMAT environment variable.

    Unknown values fall back to default.
    """
    format = os.environ.get('REPOMETA_FORMAT', default).lower()
    if format not in FORMATS + ('table',):
        return default
    return format
