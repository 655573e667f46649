from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Sequence

from .process import ProcessState

logger = logging.getLogger(__name__)


class Policy(str, Enum):
    """Closed set of scheduling policies understood by the engine."""

    FCFS = "FCFS"
    SJF = "SJF"
    SRTF = "SRTF"
    RR = "RR"
    PRIORITY = "Priority"
    PRIORITY_NP = "PriorityNP"

    @classmethod
    def parse(cls, raw: str | Policy) -> Policy:
        """Resolve a policy name, falling back to FCFS for unknown names."""

        if isinstance(raw, Policy):
            return raw
        wanted = str(raw).strip().lower()
        for policy in cls:
            if policy.value.lower() == wanted:
                return policy
        logger.warning("Unknown scheduling policy %r, falling back to %s", raw, cls.FCFS.value)
        return cls.FCFS

    @property
    def preemptive(self) -> bool:
        return self in (Policy.SRTF, Policy.RR, Policy.PRIORITY)


class DispatchRule(ABC):
    """Ordering and preemption rules applied to the ready pool for one policy."""

    policy: Policy

    @abstractmethod
    def select(self, ready: Sequence[ProcessState]) -> ProcessState:
        """Return the ready process that should be dispatched next."""

    @abstractmethod
    def ordered(self, ready: Sequence[ProcessState]) -> list[ProcessState]:
        """Return the ready pool in dispatch order without modifying it."""

    def quantum_expired(self, running: ProcessState, quantum_used: int, quantum: int) -> bool:
        """Whether the running process has exhausted its time slice."""

        return False

    def challenger(self, running: ProcessState, ready: Sequence[ProcessState]) -> ProcessState | None:
        """Ready process that preempts the running one, if any."""

        return None
