"""
Core business logic for the hiring pipeline.

Submodules:
- errors: Typed error hierarchy shared by every layer
- pipeline: Status transitions, scoring, analytics, activity and export
"""
