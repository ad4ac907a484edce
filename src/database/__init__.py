"""
Хранилище задач
"""
from .job_store import JobStore, JobStoreError, InvalidTransitionError

__all__ = ['JobStore', 'JobStoreError', 'InvalidTransitionError']
