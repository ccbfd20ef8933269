from typing import ClassVar

from orm_doctor.config import AnalysisSettings, InsecureRandomSettings
from orm_doctor.domain import Finding, FindingKind, Origin, Severity
from orm_doctor.findings import IssueFactory
from orm_doctor.inspections.base import AnalysisContext
from orm_doctor.matcher import CallSite, CodeUnit
from orm_doctor.matcher.declarations import short_name


def _function_name(name: str | None) -> str:
    # PHP function names are case-insensitive.
    return short_name(name or "").lower()


class InsecureRandomInspection:
    """Flags predictable randomness in methods that produce secrets."""

    name: str = "insecure_random"

    INSECURE_FUNCTIONS: ClassVar[frozenset[str]] = frozenset(
        {"rand", "mt_rand", "srand", "mt_srand", "uniqid", "microtime", "time"}
    )
    WEAK_HASHES: ClassVar[frozenset[str]] = frozenset({"md5", "sha1"})

    def __init__(self, issues: IssueFactory | None = None) -> None:
        self._issues = issues or IssueFactory()

    def is_sensitive(self, method: str, source: str, config: InsecureRandomSettings) -> bool:
        method, source = method.lower(), source.lower()
        return any(context in method or context in source for context in config.sensitive_contexts)

    def usages(self, context: AnalysisContext, unit: CodeUnit) -> list[tuple[str, str, CallSite]]:
        """Return ``(usage_type, function, call_site)`` once per function in ``unit``."""
        parsed = context.matcher.parse(unit)
        reported: set[str] = set()
        usages: list[tuple[str, str, CallSite]] = []
        for site in context.matcher.find_calls_matching(parsed, lambda s: s.kind == "function"):
            name = _function_name(site.callee_name)
            if name in self.WEAK_HASHES:
                inner = [
                    _function_name(shape.name)
                    for shape in site.argument_shapes
                    if shape.kind == "call" and _function_name(shape.name) in self.INSECURE_FUNCTIONS
                ]
                if not inner:
                    continue
                usage, function = "weak_hash", f"{name}({inner[0]}())"
            elif name in self.INSECURE_FUNCTIONS:
                usage, function = "direct_call", name
            else:
                continue

            if function in reported:
                continue
            reported.add(function)
            usages.append((usage, function, site))
        return usages

    def inspect(self, context: AnalysisContext, settings: AnalysisSettings) -> list[Finding]:
        config = settings.insecure_random
        findings: list[Finding] = []
        for declaration in context.sources.types:
            for method, unit in declaration.methods.items():
                if not self.is_sensitive(method, unit.source, config):
                    continue
                for usage, function, site in self.usages(context, unit):
                    findings.append(self._finding(declaration.name, method, unit, usage, function, site))
        return findings

    def _finding(
        self, type_name: str, method: str, unit: CodeUnit, usage: str, function: str, site: CallSite
    ) -> Finding:
        if usage == "weak_hash":
            description = (
                f"{type_name}::{method}() hashes predictable input with {function}; hashing "
                f"does not add entropy."
            )
        else:
            description = f"{type_name}::{method}() uses {function}() where a cryptographically secure value is needed."

        return self._issues.create(
            FindingKind.INSECURE_RANDOM,
            {
                "severity": Severity.CRITICAL,
                "title": f"Insecure Random: {function} in {type_name}::{method}()",
                "description": description,
                "origin": Origin(file=unit.file, line=site.line, symbol=f"{type_name}::{method}", detail=function),
                "details": {
                    "usage": usage,
                    "function": function,
                    "method": method,
                },
            },
        )
