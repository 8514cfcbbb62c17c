"""
incident.io -> Jira component field sync.

Receives incident.io webhooks and copies catalog-backed custom field values
(impacted / responsible components) onto the linked Jira issue.
"""

__version__ = "1.0.0"
