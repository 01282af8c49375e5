"""taskbell: a console task list with due-time reminders."""

__version__ = "0.1.0"
