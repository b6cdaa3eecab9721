"""
Shared pieces used by every coaching app: the TaskService facade with its
local, SQS and Celery backends, and the per-role dashboard.
"""
