"""
Task Importer - Spreadsheet-to-task import pipeline.

Architecture:
- core/: Stable foundation (models, HTTP client, locator, fetcher, mapper, normalizers)
- store/: Task store interface and SQLite implementation
- config/: YAML-driven settings
- orchestrator.py: Import coordination and outcome reporting
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
