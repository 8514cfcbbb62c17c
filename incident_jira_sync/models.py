"""
Data models for incident.io webhook events and Jira field values.

Inbound webhook payloads are parsed with pydantic (untrusted wire data,
frozen after parse). Values produced by the sync pipeline itself are plain
frozen dataclasses.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EVENT_FIELD_UPDATED = "incident.custom_field_updated"
EVENT_INCIDENT_UPDATED_V2 = "public_incident.incident_updated_v2"
HANDLED_EVENT_TYPES = (EVENT_FIELD_UPDATED, EVENT_INCIDENT_UPDATED_V2)


###############################################################################
# INBOUND EVENT (incident.io webhook)
###############################################################################
class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class CatalogEntryRef(_WireModel):
    id: Optional[str] = None
    name: Optional[str] = None
    external_id: Optional[str] = None


class CustomFieldValue(_WireModel):
    value_catalog_entry: Optional[CatalogEntryRef] = None


class CustomField(_WireModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    field_type: Optional[str] = None


class CustomFieldEntry(_WireModel):
    custom_field: CustomField = Field(default_factory=CustomField)
    values: List[CustomFieldValue] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def default_values(cls, value):
        return [] if value is None else value

    @property
    def field_name(self) -> str:
        return self.custom_field.name or ""


class ExternalIssueReference(_WireModel):
    provider: Optional[str] = None
    issue_name: Optional[str] = None
    issue_permalink: Optional[str] = None


class Incident(_WireModel):
    id: Optional[str] = None
    name: Optional[str] = None
    external_issue_reference: ExternalIssueReference = Field(default_factory=ExternalIssueReference)
    custom_field_entries: List[CustomFieldEntry] = Field(default_factory=list)

    @field_validator("custom_field_entries", mode="before")
    @classmethod
    def default_entries(cls, value):
        return [] if value is None else value

    @field_validator("external_issue_reference", mode="before")
    @classmethod
    def default_reference(cls, value):
        return {} if value is None else value

    @property
    def issue_key(self) -> str:
        """The linked Jira issue key, or an empty string when there is none."""
        return (self.external_issue_reference.issue_name or "").strip()


class IncidentEvent(_WireModel):
    """
    An incident.io webhook delivery.

    The incident is carried under "incident" for most event types, and under
    the event type's own key for the v2 incident-updated event.
    """
    event_type: Optional[str] = None
    incident: Incident = Field(default_factory=Incident)
    incident_updated_v2: Incident = Field(default_factory=Incident, alias=EVENT_INCIDENT_UPDATED_V2)

    @field_validator("incident", "incident_updated_v2", mode="before")
    @classmethod
    def default_incident(cls, value):
        return {} if value is None else value

    @property
    def is_handled(self) -> bool:
        return self.event_type in HANDLED_EVENT_TYPES

    def incident_for_kind(self) -> Incident:
        """Return the incident sub-object matching the declared event type."""
        if self.event_type == EVENT_INCIDENT_UPDATED_V2:
            return self.incident_updated_v2
        return self.incident


###############################################################################
# SYNC PIPELINE VALUES
###############################################################################
@dataclass(frozen=True)
class FieldMapping:
    """Pairs an incident.io custom field name with a Jira custom field id."""
    key: str
    incident_field_name: str
    jira_field_id: str


@dataclass(frozen=True)
class CatalogLookup:
    catalog_entry_id: str
    object_key: Optional[str] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.object_key is not None


@dataclass(frozen=True)
class TargetFieldValue:
    """A Jira Assets object reference: "<workspace id>:<object id>" plus the bare object id."""
    reference: str
    object_reference: str

    def to_payload(self) -> Dict[str, str]:
        return {"id": self.reference, "objectId": self.object_reference}


@dataclass(frozen=True)
class ValueResolution:
    catalog_entry_id: str
    catalog_entry_name: str = ""
    value: Optional[TargetFieldValue] = None
    skip_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class UpdateResult:
    ok: bool
    status_code: int
    body: Any = None
    values: List[TargetFieldValue] = field(default_factory=list)
    attempts: int = 1
