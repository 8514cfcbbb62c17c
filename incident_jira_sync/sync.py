"""
incident.io -> Jira component field sync.

For every configured field mapping, the incident's matching custom field
values are resolved through the incident.io catalog into Jira Assets object
references and written to the linked Jira issue.
"""

import logging
from typing import List

from .catalog import CatalogResolver
from .errors import FieldUpdateError, NoLinkedIssueError
from .jira_updater import JiraFieldUpdater
from .models import (
    CustomFieldEntry,
    FieldMapping,
    Incident,
    IncidentEvent,
    TargetFieldValue,
    ValueResolution,
)
from .references import extract_object_id, format_component_value
from .session import create_session

logger = logging.getLogger(__name__)

STATUS_IGNORED = "ignored"
STATUS_SUCCESS = "success"


class FieldSyncer:
    """Drives catalog resolution and Jira updates for one event at a time. Holds no per-event state."""

    def __init__(self, settings, resolver, updater):
        self.settings = settings
        self.resolver = resolver
        self.updater = updater

    @classmethod
    def from_settings(cls, settings, session=None):
        """Wire the resolver and updater over one shared HTTP session."""
        session = session or create_session(settings)
        return cls(settings, CatalogResolver(settings, session), JiraFieldUpdater(settings, session))

    ###########################################################################
    # VALUE RESOLUTION
    ###########################################################################
    def resolve_value(self, catalog_entry_id, catalog_entry_name="") -> ValueResolution:
        """Catalog entry id -> object key -> object id -> Jira value, or the reason it was skipped."""
        lookup = self.resolver.resolve(catalog_entry_id)
        if not lookup.found:
            return ValueResolution(catalog_entry_id, catalog_entry_name, skip_reason=lookup.error or "object key not found")

        object_id = extract_object_id(lookup.object_key)
        if object_id is None:
            return ValueResolution(
                catalog_entry_id,
                catalog_entry_name,
                skip_reason=f"could not extract numeric ID from object key: {lookup.object_key}",
            )

        value = format_component_value(self.settings.jira_workspace_id, object_id)
        return ValueResolution(catalog_entry_id, catalog_entry_name, value=value)

    def resolve_field_values(self, entry: CustomFieldEntry) -> List[ValueResolution]:
        """Resolve every catalog-backed value of a custom field entry, in order."""
        resolutions = []
        for field_value in entry.values:
            catalog_entry = field_value.value_catalog_entry
            if catalog_entry is None or not catalog_entry.id:
                continue
            resolution = self.resolve_value(catalog_entry.id, catalog_entry.name or "")
            if resolution.ok:
                logger.info(f"Mapped {resolution.catalog_entry_name or resolution.catalog_entry_id} -> {resolution.value.to_payload()}")
            else:
                logger.warning(
                    f"Skipping catalog entry {resolution.catalog_entry_id} in field '{entry.field_name}': {resolution.skip_reason}"
                )
            resolutions.append(resolution)
        return resolutions

    ###########################################################################
    # FIELD PROCESSING
    ###########################################################################
    def process_field(self, entry: CustomFieldEntry, issue_key: str, field_mapping: FieldMapping) -> bool:
        """
        Sync one custom field entry to its Jira field.

        Returns False when nothing resolved and the field was skipped.
        Raises FieldUpdateError when Jira rejects the update.
        """
        values: List[TargetFieldValue] = [r.value for r in self.resolve_field_values(entry) if r.ok]
        if not values:
            logger.info(f"No resolvable values for '{field_mapping.incident_field_name}' on {issue_key}, skipping.")
            return False

        result = self.updater.update(issue_key, field_mapping.jira_field_id, values)
        if not result.ok:
            raise FieldUpdateError(issue_key, field_mapping.jira_field_id, result.status_code, result.body)
        if len(result.values) < len(values):
            logger.warning(
                f"Jira accepted only the first of {len(values)} values for {field_mapping.jira_field_id} on {issue_key}"
            )
        return True

    def process_incident(self, incident: Incident):
        """Sync every mapped field of the incident, stopping at the first failed update."""
        issue_key = incident.issue_key
        if not issue_key:
            raise NoLinkedIssueError(f"No Jira issue found for incident {incident.id or '<unknown>'}")

        logger.info(f"Processing incident update for Jira issue: {issue_key}")
        for field_mapping in self.settings.field_mappings:
            for entry in incident.custom_field_entries:
                if entry.field_name != field_mapping.incident_field_name:
                    continue
                logger.info(f"Processing {field_mapping.key} field '{entry.field_name}' for {issue_key}")
                try:
                    self.process_field(entry, issue_key, field_mapping)
                except FieldUpdateError as e:
                    logger.error(f"Failed to process {field_mapping.key}: {e}")
                    raise

    def handle(self, event: IncidentEvent) -> str:
        """Process a webhook event. Returns STATUS_IGNORED or STATUS_SUCCESS; raises SyncError on failure."""
        if not event.is_handled:
            logger.info(f"Ignoring event type: {event.event_type}")
            return STATUS_IGNORED

        self.process_incident(event.incident_for_kind())
        logger.info("Successfully processed incident update")
        return STATUS_SUCCESS
