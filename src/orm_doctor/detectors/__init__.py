from orm_doctor.detectors.base import TraceDetector
from orm_doctor.detectors.bulk_operation import BulkOperationDetector
from orm_doctor.detectors.flush_in_loop import FlushInLoopDetector
from orm_doctor.detectors.hydration import HydrationDetector
from orm_doctor.detectors.missing_index import MissingIndexDetector
from orm_doctor.detectors.n_plus_one import NPlusOneDetector
from orm_doctor.detectors.platform import (
    SUPPORTED_PLATFORMS,
    ExecutionPlanSummary,
    PlanRow,
    PlatformIntrospector,
    require_supported_platform,
)
from orm_doctor.detectors.registry import DetectorRegistry
from orm_doctor.detectors.slow_query import SlowQueryDetector

__all__ = [
    "TraceDetector",
    "DetectorRegistry",
    "NPlusOneDetector",
    "SlowQueryDetector",
    "HydrationDetector",
    "BulkOperationDetector",
    "FlushInLoopDetector",
    "MissingIndexDetector",
    "PlatformIntrospector",
    "ExecutionPlanSummary",
    "PlanRow",
    "SUPPORTED_PLATFORMS",
    "require_supported_platform",
]
