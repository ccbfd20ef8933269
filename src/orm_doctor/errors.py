from collections.abc import Iterable


class OrmDoctorError(Exception):
    pass


class ConfigurationError(OrmDoctorError):
    pass


class UnknownFindingKindError(ConfigurationError):
    def __init__(self, kind: object, valid_kinds: Iterable[str]) -> None:
        self.kind = kind
        self.valid_kinds = tuple(valid_kinds)
        super().__init__(
            f'Unknown finding kind "{kind}". Available kinds: {", ".join(self.valid_kinds)}'
        )


class UnsupportedPlatformError(ConfigurationError):
    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(f"Unsupported database platform for analysis: {platform}")


class TraceFrozenError(OrmDoctorError):
    pass
