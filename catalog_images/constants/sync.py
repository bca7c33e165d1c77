"""Constants for sync operations."""


class SyncAction:
    """Sync action constants."""
    CREATED = "created"
    DELETED = "deleted"
    SKIPPED = "skipped"
    ERROR = "error"


class SyncMode:
    """Which orchestrator a run executes."""
    DELETE = "delete"
    UPLOAD = "upload"
