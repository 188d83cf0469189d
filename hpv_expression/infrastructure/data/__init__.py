"""
Data access package for the HPV expression pipeline.

This package contains the BigQuery executor that fetches query results and the
saver that persists intermediate tables and ranked results.
"""

from .data_saver import AnalysisDataSaver
from .query_executor import BigQueryExecutor

__all__ = ["AnalysisDataSaver", "BigQueryExecutor"]
