
from .engine import (
    SchedulingEngine,
    calculate_compression_savings,
    compare_timeline_results,
    extract_critical_path,
)
from .critical_path import CriticalPathCalculator, critical_path_calculator
from .dates import DateAssigner, create_date_assignment_options, date_assigner
from .features import FeatureFlags, compute_overlap_days, load_feature_flags
from .graph import build_task_graph, has_dependencies
from .models import (
    CPMResult,
    CPMTiming,
    DateAssignmentOptions,
    DateAssignmentResult,
    ScheduleResult,
    TaskGraph,
    TaskNode,
)
from .sequential import build_asset_timeline_sequential
from .validator import DependencyValidator, dependency_validator

__all__ = [
    "SchedulingEngine",
    "calculate_compression_savings",
    "compare_timeline_results",
    "extract_critical_path",
    "CriticalPathCalculator",
    "critical_path_calculator",
    "DateAssigner",
    "create_date_assignment_options",
    "date_assigner",
    "FeatureFlags",
    "compute_overlap_days",
    "load_feature_flags",
    "build_task_graph",
    "has_dependencies",
    "CPMResult",
    "CPMTiming",
    "DateAssignmentOptions",
    "DateAssignmentResult",
    "ScheduleResult",
    "TaskGraph",
    "TaskNode",
    "build_asset_timeline_sequential",
    "DependencyValidator",
    "dependency_validator",
]
