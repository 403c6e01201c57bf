# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: taskboard).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKBOARD_LOG_FILE_LEVEL": "Log file level (default: DEBUG).",
    "TASKBOARD_LOG_FILE": "Log file path (default: <data_dir>/taskboard.log).",
    "TASKBOARD_QUIET_LOGGERS": (
        "Loggers shown on the console only at TASKBOARD_QUIET_LOG_LEVEL "
        "(default: taskboard.cache.refresh_scheduler)."
    ),
    "TASKBOARD_QUIET_LOG_LEVEL": "Console threshold for the quiet loggers (default: WARNING).",
    # Session
    "TASKBOARD_SUBJECT_ID": "User the dashboard data is scoped to (required by the CLI).",
    "TASKBOARD_RESOURCES": "Comma/space separated resource names (default: delegation fms checklist ht pc).",
    # Cache / refresh
    "TASKBOARD_CACHE_TTL_SECONDS": "How long a snapshot counts as fresh (default: 900).",
    "TASKBOARD_REFRESH_INTERVAL_SECONDS": "Background refresh period per resource (default: 900).",
    "TASKBOARD_FETCH_TIMEOUT_SECONDS": "Deadline for one fetch; 0 disables it (default: 0).",
    "TASKBOARD_STRICT_RECENCY": "Reject writes from fetches older than the stored one (true/false).",
    "TASKBOARD_MULTI_SUBSCRIBER": "Keep every new-record subscriber instead of replacing (true/false).",
    # Paths (gitignored)
    "TASKBOARD_DATA_DIR": "Local data directory (default: .local/taskboard).",
    "TASKBOARD_SOURCES_DIR": "Directory of <resource>.json files (default: <data_dir>/sources).",
    "TASKBOARD_READ_STATUS_DB_PATH": (
        "Read-status SQLite path (default: <data_dir>/read_status.sqlite3)."
    ),
}
