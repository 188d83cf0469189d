"""
Business logic services package for the HPV expression pipeline.
"""

from .cohort_aligner import CohortAligner
from .differential_tester import DifferentialTester
from .query_builder import QueryBuilder
from .result_reshaper import ResultReshaper

__all__ = [
    "CohortAligner",
    "DifferentialTester",
    "QueryBuilder",
    "ResultReshaper",
]
