"""
Database repositories for the hiring pipeline.

This module provides repository classes for the pipeline's collections,
implementing the repository pattern for clean data access.
"""

# Base repository
from .base import BaseRepository

# Entity repositories
from .application_repository import ApplicationRepository, get_application_repository
from .job_repository import JobRepository, get_job_repository

__all__ = [
    # Base
    "BaseRepository",
    # Application
    "ApplicationRepository",
    "get_application_repository",
    # Job
    "JobRepository",
    "get_job_repository",
]
