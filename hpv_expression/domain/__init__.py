"""
This package contains the domain layer for the HPV expression pipeline.

The domain layer is responsible for the business logic of the pipeline.
"""

from .models import (
    AlignedCohort,
    AnalysisConfig,
    AnalysisResult,
    CohortSpec,
    FeatureMatrix,
    TableRef,
)

__all__ = [
    "AlignedCohort",
    "AnalysisConfig",
    "AnalysisResult",
    "CohortSpec",
    "FeatureMatrix",
    "TableRef",
]
