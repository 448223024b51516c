"""
Run an ordered list of scheduling policies over one process set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .algorithms import PRIORITY_ALGORITHMS, normalize_algorithm, run_algorithm
from .models import Process, ScheduleResult, validate_processes

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2

# Numeric tags accepted by the original console front-end.
NUMERIC_TAGS = {
    "1": "fcfs",
    "2": "rr",
    "3": "spn",
    "4": "srt",
    "5": "hrrn",
}


@dataclass(frozen=True)
class PolicyRequest:
    algorithm: str
    quantum: Optional[int] = None

    @property
    def label(self) -> str:
        if self.quantum is None:
            return self.algorithm
        return f"{self.algorithm}-{self.quantum}"


def parse_policy(token: str, default_quantum: int = DEFAULT_QUANTUM) -> PolicyRequest:
    """
    Parse one policy token such as ``fcfs``, ``rr-3``, ``rr:3`` or ``2-3``.
    """
    token = token.strip().lower()
    if not token:
        raise ValueError("Empty algorithm token")

    name, sep, quantum_text = token.replace(":", "-").partition("-")
    name = normalize_algorithm(NUMERIC_TAGS.get(name, name))

    if name != "rr":
        if sep:
            raise ValueError(f"Only round robin takes a quantum, got '{token}'")
        return PolicyRequest(algorithm=name)

    if not sep:
        quantum = default_quantum
    else:
        try:
            quantum = int(quantum_text)
        except ValueError as exc:
            raise ValueError(f"Invalid quantum in '{token}'") from exc
    if quantum <= 0:
        raise ValueError(f"Round robin quantum must be positive, got {quantum}")
    return PolicyRequest(algorithm=name, quantum=quantum)


def parse_policies(text: str, default_quantum: int = DEFAULT_QUANTUM) -> List[PolicyRequest]:
    """
    Parse a comma separated policy list, e.g. ``"1,2-2,5"`` or ``"fcfs,rr-4,hrrn"``.
    """
    return [parse_policy(tok, default_quantum) for tok in text.split(",") if tok.strip()]


def requires_priority(requests: Iterable[PolicyRequest]) -> bool:
    return any(r.algorithm in PRIORITY_ALGORITHMS for r in requests)


def run_simulation(
    requests: Iterable[PolicyRequest],
    processes: List[Process],
    end_time: Optional[int] = None,
) -> List[ScheduleResult]:
    """
    Run every requested policy in order. Each run starts from fresh process
    state; nothing is carried from one run to the next.
    """
    validate_processes(processes)

    results: List[ScheduleResult] = []
    for request in requests:
        logger.info("Running %s on %d processes", request.label, len(processes))
        results.append(
            run_algorithm(
                request.algorithm,
                processes,
                quantum=request.quantum,
                end_time=end_time,
            )
        )
    return results
