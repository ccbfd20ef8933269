from orm_doctor.matcher.declarations import SourceIndex, TraitUse, TypeDeclaration
from orm_doctor.matcher.delegation import InitializationResolver
from orm_doctor.matcher.matcher import PatternMatcher
from orm_doctor.matcher.parser import CacheStats, CodeUnit, ParseCache, ParsedUnit
from orm_doctor.matcher.queries import (
    CallSequence,
    CallSite,
    NamePattern,
    ValueShape,
    find_calls_matching,
    has_call,
    has_field_assignment,
    is_collection,
)

__all__ = [
    "CacheStats",
    "CallSequence",
    "CallSite",
    "CodeUnit",
    "InitializationResolver",
    "NamePattern",
    "ParseCache",
    "ParsedUnit",
    "PatternMatcher",
    "SourceIndex",
    "TraitUse",
    "TypeDeclaration",
    "ValueShape",
    "find_calls_matching",
    "has_call",
    "has_field_assignment",
    "is_collection",
]
