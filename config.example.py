# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use .env (local, gitignored) for machine-specific values.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKBELL_APP_NAME": "App display name, also used as the notification app name (default: taskbell).",
    "TASKBELL_LOG_LEVEL": "Console logging level (default: INFO). The file log is always DEBUG.",
    # Paths (gitignored)
    "TASKBELL_DATA_DIR": "Local data directory for the database and taskbell.log (default: .local/taskbell).",
    "TASKBELL_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Reminders
    "TASKBELL_REMINDER_INTERVAL_SECONDS": "How often due tasks are checked (default: 1.0).",
    "TASKBELL_REMINDER_WINDOW_SECONDS": "Tolerance around the due instant, both sides (default: 5.0).",
    # Notification channels
    "TASKBELL_SYSTEM_NOTIFICATIONS": (
        "default | granted | denied. 'default' enables desktop alerts when notify-send is installed."
    ),
    "TASKBELL_NOTIFICATION_TIMEOUT_SECONDS": "Desktop alerts are withdrawn after this delay (default: 10).",
    "TASKBELL_AUDIO_ENABLED": "Play a short beep on reminders (true/false, default: true).",
}
