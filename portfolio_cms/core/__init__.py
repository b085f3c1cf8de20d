"""Core domain - data models, default dataset and the state store."""

from .models import AppState, ArchiveItem, Category, Project, ProjectStatus, Service
from .store import StateStore

__all__ = ["AppState", "ArchiveItem", "Category", "Project", "ProjectStatus", "Service", "StateStore"]
