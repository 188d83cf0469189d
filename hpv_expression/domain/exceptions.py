"""
Error taxonomy for the HPV expression pipeline.
"""


class HPVExpressionError(Exception):
    """Base class for all pipeline errors"""


class ServiceError(HPVExpressionError):
    """The query service was unreachable, rejected the query or ran out of quota"""


class ShapeError(HPVExpressionError):
    """Reshaping produced a non-scalar or inconsistent cell"""


class AlignmentError(HPVExpressionError):
    """Clinical labels and feature matrix rows no longer correspond"""


class ClinicalDataError(HPVExpressionError):
    """Clinical records violate the HPV call / status consistency rule"""


class InsufficientDataError(HPVExpressionError):
    """Too few non-missing values in a group to test a gene"""

    def __init__(self, gene: str, group_sizes: dict, min_group_size: int):
        self.gene = gene
        self.group_sizes = group_sizes
        self.min_group_size = min_group_size
        super().__init__(
            f"Gene {gene}: group sizes {group_sizes} below minimum {min_group_size}"
        )
