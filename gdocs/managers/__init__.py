"""
Google Docs Operation Managers

This package provides high-level manager classes for multi-step Google Docs
operations that need the document re-read between batches.
"""

from .table_operation_manager import MaterializationReport, TableOperationManager

__all__ = [
    "TableOperationManager",
    "MaterializationReport",
]
