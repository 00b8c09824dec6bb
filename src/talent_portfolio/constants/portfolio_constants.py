"""Limits and user-facing messages shared by the portfolio client and API.

Both sides enforce the same upload ceiling so that a collection the client
accepts is never rejected by the server for size alone.
"""

from __future__ import annotations

MAX_UPLOAD_MB = 100
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

# Client-side validation messages
MISSING_FILE_MESSAGE = "Item at position {position} is missing its file."
FILE_TOO_LARGE_MESSAGE = "File {filename} exceeds the {limit}MB limit."
NO_FEATURED_MESSAGE = "Select one item as the featured image."
MULTIPLE_FEATURED_MESSAGE = "Only one item can be featured."

VALIDATION_FAILED_MESSAGE = "Validation failed"
GENERIC_SYNC_FAILURE = "Sync failed"
SYNC_SUCCESS_MESSAGE = "Portfolio synced successfully"

# Key used when local validation errors are reported as a field-error map
GENERAL_ERROR_FIELD = "general"

# Prefix for client-minted identities of not-yet-uploaded items
TEMP_KEY_PREFIX = "new-"
