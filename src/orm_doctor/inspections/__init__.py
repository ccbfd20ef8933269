from orm_doctor.inspections.base import AnalysisContext, EntityInspection
from orm_doctor.inspections.cascade_remove import CascadeRemoveInspection
from orm_doctor.inspections.collection_initialization import CollectionInitializationInspection
from orm_doctor.inspections.insecure_random import InsecureRandomInspection
from orm_doctor.inspections.orphan_removal import MissingOrphanRemovalInspection

DEFAULT_INSPECTIONS = (
    CollectionInitializationInspection,
    MissingOrphanRemovalInspection,
    CascadeRemoveInspection,
    InsecureRandomInspection,
)

__all__ = [
    "AnalysisContext",
    "CascadeRemoveInspection",
    "CollectionInitializationInspection",
    "DEFAULT_INSPECTIONS",
    "EntityInspection",
    "InsecureRandomInspection",
    "MissingOrphanRemovalInspection",
]
