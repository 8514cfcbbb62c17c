"""Exceptions raised by the sync relay."""


class SyncError(Exception):
    """Processing of an incident event failed."""


class NoLinkedIssueError(SyncError):
    """The incident has no linked Jira issue to write to."""


class FieldUpdateError(SyncError):
    """Jira rejected a field update, fallback included."""

    def __init__(self, issue_key, field_id, status_code, body):
        self.issue_key = issue_key
        self.field_id = field_id
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Jira update of {field_id} on {issue_key} failed with status {status_code}: {body}"
        )


class ConfigError(Exception):
    """Configuration is missing or invalid."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))
