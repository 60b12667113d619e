"""Taskboard: personal task lists with virtual views, blocking and progression."""
