"""Discrete-time CPU scheduling engine and simulation helpers."""

from .process import ProcessSpec, ProcessState
from .scheduler import Policy
from .engine import DuplicateProcessError, EngineConfig, SchedulingEngine
from .snapshot import EngineSnapshot
from .simulator import Simulation, SimulationResult, SimulationStalledError
from . import schedulers
from . import workload
from . import metrics
from . import evaluation

__all__ = [
	"ProcessSpec",
	"ProcessState",
	"Policy",
	"DuplicateProcessError",
	"EngineConfig",
	"SchedulingEngine",
	"EngineSnapshot",
	"Simulation",
	"SimulationResult",
	"SimulationStalledError",
	"schedulers",
	"workload",
	"metrics",
	"evaluation",
]
