"""Pydantic models describing the intelligence service payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class IntelligenceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ResourceMeta(IntelligenceBaseModel):
    href: str | None = None


class ComponentVersionStatusPayload(IntelligenceBaseModel):
    component_name: str = Field(alias="componentName")
    component_version_name: str = Field(alias="componentVersionName")
    component_version: str | None = Field(default=None, alias="componentVersion")
    policy_status: str | None = Field(default=None, alias="bomComponentVersionPolicyStatus")

    _normalize_links = field_validator("component_version", "policy_status", mode="before")(
        _blank_to_none
    )


class PolicyInfoPayload(IntelligenceBaseModel):
    policy_name: str = Field(alias="policyName")
    severity: str | None = None


class PolicyContentPayload(IntelligenceBaseModel):
    project_name: str = Field(alias="projectName")
    project_version_name: str = Field(alias="projectVersionName")
    component_version_statuses: list[ComponentVersionStatusPayload] = Field(
        default_factory=list, alias="componentVersionStatuses"
    )
    policy_infos: list[PolicyInfoPayload] = Field(default_factory=list, alias="policyInfos")


class AffectedProjectVersionPayload(IntelligenceBaseModel):
    project_name: str = Field(alias="projectName")
    project_version_name: str = Field(alias="projectVersionName")


class VulnerabilitySourcePayload(IntelligenceBaseModel):
    vulnerability_id: str = Field(alias="vulnerabilityId")
    source: str | None = None


class VulnerabilityContentPayload(IntelligenceBaseModel):
    component_name: str = Field(alias="componentName")
    version_name: str = Field(alias="versionName")
    component_version: str | None = Field(default=None, alias="componentVersion")
    affected_project_versions: list[AffectedProjectVersionPayload] = Field(
        default_factory=list, alias="affectedProjectVersions"
    )
    new_vulnerability_ids: list[VulnerabilitySourcePayload] = Field(
        default_factory=list, alias="newVulnerabilityIds"
    )
    updated_vulnerability_ids: list[VulnerabilitySourcePayload] = Field(
        default_factory=list, alias="updatedVulnerabilityIds"
    )
    deleted_vulnerability_ids: list[VulnerabilitySourcePayload] = Field(
        default_factory=list, alias="deletedVulnerabilityIds"
    )


class NotificationPayload(IntelligenceBaseModel):
    """One notification item; ``content`` is interpreted per ``type``."""

    type: str
    created_at: datetime | None = Field(default=None, alias="createdAt")
    content: dict[str, object] = Field(default_factory=dict)
    meta: ResourceMeta | None = Field(default=None, alias="_meta")

    @property
    def notification_id(self) -> str | None:
        if self.meta is None or not self.meta.href:
            return None
        return self.meta.href.rstrip("/").rsplit("/", 1)[-1]


class NotificationPage(IntelligenceBaseModel):
    total_count: int = Field(default=0, alias="totalCount")
    items: list[NotificationPayload] = Field(default_factory=list)


class PolicyStatusPayload(IntelligenceBaseModel):
    approval_status: str = Field(alias="approvalStatus")


class RiskCountsPayload(IntelligenceBaseModel):
    critical: int = Field(default=0, alias="CRITICAL")
    high: int = Field(default=0, alias="HIGH")
    medium: int = Field(default=0, alias="MEDIUM")
    low: int = Field(default=0, alias="LOW")


class RiskProfilePayload(IntelligenceBaseModel):
    categories: dict[str, RiskCountsPayload] = Field(default_factory=dict)

    @property
    def vulnerabilities(self) -> RiskCountsPayload:
        return self.categories.get("VULNERABILITY") or RiskCountsPayload()
