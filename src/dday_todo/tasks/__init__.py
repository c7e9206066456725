"""
Task subsystem.

Components:
- task_models.py: data structures (Task, LogEntry, TaskStatus)
- date_parser.py: due-date extraction from free text
- deadline.py: D-Day labels
- task_store.py: in-memory collection + mutations + merge import
- records.py: wire records <-> Task (legacy upgrade, import validation)
- ordering.py: display order
- export.py: CSV rows
- task_api.py: small high-level helpers used by the command layer
"""
