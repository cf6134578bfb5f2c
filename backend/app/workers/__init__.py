"""Workers - Celery app, queue consumers and cron (beat) jobs.

Invariants:
    - Tasks are thin: open a session, call the same repositories the API uses
    - Task names are stable strings; publishers refer to them by name only
"""
