"""
Task subsystem.

Components:
- task_models.py: data structures (Task, FilterMode)
- date_parsing.py: date/time extraction from task text + due-date parsing
- task_store.py: SQLite-backed storage with a change-notification stream
- filters.py: pure read-side projections (all/active/completed)
- task_controller.py: state container + CRUD operations used by the UI
"""
