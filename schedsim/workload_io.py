from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import List

from .models import Process, validate_processes


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    if not processes:
        raise ValueError(f"Workload {path} defines no processes")
    validate_processes(processes)
    return processes


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(process_from_mapping(row))
    return processes


def _to_int(value) -> int:
    # int() would truncate 1.5 to 1.
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"Expected a whole number, got {value!r}")
    return int(value)


def process_from_mapping(mapping) -> Process:
    try:
        name = mapping.get("name") or mapping["pid"]
        arrival_time = _to_int(mapping["arrival_time"])
        burst_time = _to_int(mapping["burst_time"])
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = _to_int(priority_val) if priority_val not in (None, "") else None
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid priority in process entry: {mapping!r}") from exc

    return Process(
        name=str(name).strip(),
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )


def parse_process_line(line: str, with_priority: bool = False) -> Process:
    """
    Parse ``name arrival burst [priority]`` as typed at the interactive prompt.
    """
    fields = line.split()
    expected = 4 if with_priority else 3
    if len(fields) < expected:
        hint = "name arrival burst priority" if with_priority else "name arrival burst"
        raise ValueError(f"Expected '{hint}', got {line!r}")

    mapping = {"name": fields[0], "arrival_time": fields[1], "burst_time": fields[2]}
    if with_priority:
        mapping["priority"] = fields[3]
    return process_from_mapping(mapping)
