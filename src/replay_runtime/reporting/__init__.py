"""
Reporting module for the replay runtime.

Writes step results (API responses, query rows) for later inspection.
"""

from replay_runtime.reporting.exporters import ResultExporter

__all__ = [
    "ResultExporter",
]
