__version__ = "0.1.0"

from orm_doctor.config import AnalysisSettings
from orm_doctor.core import AnalysisPipeline
from orm_doctor.detectors import (
    BulkOperationDetector,
    DetectorRegistry,
    FlushInLoopDetector,
    HydrationDetector,
    MissingIndexDetector,
    NPlusOneDetector,
    PlatformIntrospector,
    SlowQueryDetector,
    TraceDetector,
)
from orm_doctor.domain import (
    AnalysisReport,
    AssociationDescriptor,
    Cardinality,
    EntityDescriptor,
    Finding,
    FindingKind,
    QueryRecord,
    QueryTrace,
    Severity,
    Suggestion,
)
from orm_doctor.errors import (
    ConfigurationError,
    OrmDoctorError,
    UnknownFindingKindError,
    UnsupportedPlatformError,
)
from orm_doctor.findings import IssueFactory, SuggestionFactory
from orm_doctor.input import ManualInput, TraceInput
from orm_doctor.inspections import AnalysisContext, EntityInspection
from orm_doctor.mapping import RelationshipClassifier
from orm_doctor.matcher import CodeUnit, PatternMatcher
from orm_doctor.output import ConsoleReportOutput, ReportOutput

__all__ = [
    "__version__",
    "AnalysisPipeline",
    "AnalysisSettings",
    "AnalysisContext",
    "AnalysisReport",
    "AssociationDescriptor",
    "Cardinality",
    "EntityDescriptor",
    "Finding",
    "FindingKind",
    "QueryRecord",
    "QueryTrace",
    "Severity",
    "Suggestion",
    "ConfigurationError",
    "OrmDoctorError",
    "UnknownFindingKindError",
    "UnsupportedPlatformError",
    "IssueFactory",
    "SuggestionFactory",
    "TraceInput",
    "ManualInput",
    "TraceDetector",
    "DetectorRegistry",
    "NPlusOneDetector",
    "SlowQueryDetector",
    "HydrationDetector",
    "BulkOperationDetector",
    "FlushInLoopDetector",
    "MissingIndexDetector",
    "PlatformIntrospector",
    "EntityInspection",
    "RelationshipClassifier",
    "CodeUnit",
    "PatternMatcher",
    "ReportOutput",
    "ConsoleReportOutput",
]
