"""Vault Scheduler: weekly grid, monthly tasks, goals and backlog stored as JSON in an Obsidian vault."""

__version__ = "0.1.0"
