"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class Ecosystem(StrEnum):
    """Package ecosystem declared for a repository."""

    BOWER = "bower"
    COCOAPODS = "cocoapods"
    COMPOSER = "composer"
    CONDA = "conda"
    CRAN = "cran"
    GEMS = "gems"
    GO = "go"
    GRADLE = "gradle"
    MAVEN = "maven"
    NPM = "npm"
    NUGET = "nuget"
    PYPI = "pypi"


_FORGES: Final[dict[Ecosystem, str]] = {
    Ecosystem.BOWER: "bower",
    Ecosystem.COCOAPODS: "cocoapods",
    Ecosystem.COMPOSER: "packagist",
    Ecosystem.CONDA: "anaconda",
    Ecosystem.CRAN: "cran",
    Ecosystem.GEMS: "rubygems",
    Ecosystem.GO: "golang",
    Ecosystem.GRADLE: "maven",
    Ecosystem.MAVEN: "maven",
    Ecosystem.NPM: "npmjs",
    Ecosystem.NUGET: "nuget",
    Ecosystem.PYPI: "pypi",
}


def forge_for(ecosystem: Ecosystem) -> str:
    """Forge name the intelligence service indexes the ecosystem under."""

    return _FORGES[ecosystem]


class ExtractionFailureKind(StrEnum):
    MALFORMED_FILENAME = "malformed_filename"
    UNSUPPORTED_EXTENSION = "unsupported_extension"
    MISSING_PARENT = "missing_parent"
    MISSING_METADATA = "missing_metadata"
    MANIFEST_NOT_FOUND = "manifest_not_found"
    ECOSYSTEM_DISABLED = "ecosystem_disabled"
    UNKNOWN_REPOSITORY = "unknown_repository"


class NotificationKind(StrEnum):
    POLICY_VIOLATION = "RULE_VIOLATION"
    POLICY_OVERRIDE = "POLICY_OVERRIDE"
    RULE_VIOLATION_CLEARED = "RULE_VIOLATION_CLEARED"
    VULNERABILITY = "VULNERABILITY"


class PolicyApprovalStatus(StrEnum):
    IN_VIOLATION = "IN_VIOLATION"
    IN_VIOLATION_OVERRIDDEN = "IN_VIOLATION_OVERRIDDEN"
    NOT_IN_VIOLATION = "NOT_IN_VIOLATION"


class PolicySeverity(StrEnum):
    BLOCKER = "BLOCKER"
    CRITICAL = "CRITICAL"
    MAJOR = "MAJOR"
    MINOR = "MINOR"
    TRIVIAL = "TRIVIAL"
    UNSPECIFIED = "UNSPECIFIED"


class InspectionStatus(StrEnum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    PENDING = "PENDING"


class ArtifactProperty(StrEnum):
    """Property keys stored on repository items."""

    PROJECT_NAME = "binsight.projectName"
    PROJECT_VERSION_NAME = "binsight.projectVersionName"
    EXTERNAL_ID = "binsight.externalId"
    POLICY_STATUS = "binsight.policyStatus"
    POLICY_SEVERITY_TYPES = "binsight.policySeverityTypes"
    CRITICAL_VULNERABILITIES = "binsight.criticalVulnerabilities"
    HIGH_VULNERABILITIES = "binsight.highVulnerabilities"
    MEDIUM_VULNERABILITIES = "binsight.mediumVulnerabilities"
    LOW_VULNERABILITIES = "binsight.lowVulnerabilities"
    INSPECTION_STATUS = "binsight.inspectionStatus"
    INSPECTION_STATUS_MESSAGE = "binsight.inspectionStatusMessage"
    INSPECTION_TIME = "binsight.inspectionTime"
    CLEARED_POLICY_RULES = "binsight.clearedPolicyRules"
    LAST_UPDATE = "binsight.lastUpdate"
