"""Analysis settings: one threshold block per detector and inspection.

The settings surface is a flat mapping of detector name to thresholds.
Absent keys fall back to the documented defaults; unknown keys are ignored.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from orm_doctor.errors import ConfigurationError


class DetectorSettings(BaseModel):
    """Common settings shared by every detector and inspection."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    enabled: bool = Field(True, description="Whether the detector runs at all")


class NPlusOneSettings(DetectorSettings):
    threshold: int = Field(3, ge=1, description="Queries sharing shape and origin before flagging")


class SlowQuerySettings(DetectorSettings):
    threshold_ms: float = Field(50.0, ge=0, description="Duration above which a query is slow")
    critical_threshold_ms: float = Field(1000.0, ge=0, description="Duration above which it is critical")


class HydrationSettings(DetectorSettings):
    row_threshold: int = Field(100, ge=1, description="Row count flagged as warning")
    critical_threshold: int = Field(1000, ge=1, description="Row count flagged as critical")

    @model_validator(mode="after")
    def _critical_dominates(self) -> "HydrationSettings":
        if self.critical_threshold < self.row_threshold:
            raise ValueError("critical_threshold must be >= row_threshold")
        return self


class BulkOperationSettings(DetectorSettings):
    threshold: int = Field(20, ge=1, description="UPDATE/DELETE statements per table before flagging")
    max_pattern_ratio: float = Field(
        0.3, ge=0, le=1, description="Maximum unique-shape ratio for a group to count as bulk"
    )


class FlushInLoopSettings(DetectorSettings):
    flush_count_threshold: int = Field(5, ge=1, description="Synchronizations tolerated per window")
    time_window_ms: float = Field(1000.0, gt=0, description="Sliding window length")


class MissingIndexSettings(DetectorSettings):
    slow_query_threshold_ms: float = Field(50.0, ge=0, description="Duration that makes a query a candidate")
    min_rows_scanned: int = Field(1000, ge=1, description="Examined rows that justify an index")
    min_occurrences: int = Field(3, ge=1, description="Repetitions that make a query a candidate")


class InsecureRandomSettings(DetectorSettings):
    sensitive_contexts: tuple[str, ...] = (
        "token",
        "secret",
        "key",
        "password",
        "salt",
        "nonce",
        "csrf",
        "reset",
        "verification",
        "api",
        "auth",
        "session",
    )


class AnalysisSettings(BaseModel):
    """Root settings object handed to detectors and inspections."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    n_plus_one: NPlusOneSettings = Field(default_factory=NPlusOneSettings)
    slow_query: SlowQuerySettings = Field(default_factory=SlowQuerySettings)
    hydration: HydrationSettings = Field(default_factory=HydrationSettings)
    bulk_operation: BulkOperationSettings = Field(default_factory=BulkOperationSettings)
    flush_in_loop: FlushInLoopSettings = Field(default_factory=FlushInLoopSettings)
    missing_index: MissingIndexSettings = Field(default_factory=MissingIndexSettings)
    collection_initialization: DetectorSettings = Field(default_factory=DetectorSettings)
    missing_orphan_removal: DetectorSettings = Field(default_factory=DetectorSettings)
    cascade_remove: DetectorSettings = Field(default_factory=DetectorSettings)
    insecure_random: InsecureRandomSettings = Field(default_factory=InsecureRandomSettings)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None = None) -> "AnalysisSettings":
        try:
            return cls.model_validate(dict(mapping or {}))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid analysis settings: {exc}") from exc

    def for_detector(self, name: str) -> DetectorSettings:
        settings = getattr(self, name, None)
        if not isinstance(settings, DetectorSettings):
            raise ConfigurationError(f"No settings block for detector {name!r}")
        return settings

    def is_enabled(self, name: str) -> bool:
        settings = getattr(self, name, None)
        if not isinstance(settings, DetectorSettings):
            return True
        return settings.enabled
