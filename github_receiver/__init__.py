"""Alertmanager webhook receiver that tracks alerts as GitHub issues."""

__version__ = "0.1.0"
