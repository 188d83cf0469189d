"""
This package contains the application layer for the HPV expression pipeline.

The application layer is responsible for orchestrating an analysis run.
"""

from .expression_analysis_service import ExpressionAnalysisService

__all__ = ["ExpressionAnalysisService"]
