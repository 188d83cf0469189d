"""
Reshaping of long-format query results into a wide feature matrix.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from hpv_expression.domain.exceptions import ShapeError
from hpv_expression.domain.models import (
    COUNT_COL,
    GENE_COL,
    PARTICIPANT_COL,
    SAMPLE_COL,
    FeatureMatrix,
)
from hpv_expression.infrastructure.logger import Logger


def sample_type_code(sample_id: str) -> str:
    """TCGA sample type, characters 14-15 of the barcode (e.g. '01', '11')"""
    return str(sample_id)[13:15]


class ResultReshaper:
    """Pivots long (sample, gene, value) records into a FeatureMatrix"""

    def __init__(self):
        self.logger = Logger()

    def pivot(
        self,
        records: pd.DataFrame,
        row_key: str = SAMPLE_COL,
        column_key: str = GENE_COL,
        value: str = COUNT_COL,
    ) -> pd.DataFrame:
        """
        Pivot a long table into one row per row_key and one column per column_key.

        Rows and columns keep first-seen order. When a (row_key, column_key) pair
        occurs more than once the first value wins. Pairs that never occur are
        left as NaN.

        Args:
            records: Long-format table
            row_key: Column providing the row index
            column_key: Column providing the column labels
            value: Column providing cell values

        Returns:
            pd.DataFrame: Wide table

        Raises:
            ShapeError: If required columns are missing or a value is non-scalar
        """
        missing = [c for c in (row_key, column_key, value) if c not in records.columns]
        if missing:
            raise ShapeError(f"Missing columns for reshape: {missing}")

        non_scalar = ~records[value].map(pd.api.types.is_scalar)
        if non_scalar.any():
            raise ShapeError(
                f"{int(non_scalar.sum())} non-scalar values in column '{value}'"
            )

        duplicated = records.duplicated([row_key, column_key], keep="first")
        if duplicated.any():
            self.logger.log_warning(
                f"Dropped {int(duplicated.sum())} duplicate ({row_key}, {column_key}) records"
            )
        unique = records.loc[~duplicated]

        try:
            numeric = unique[value].to_numpy(dtype=np.float64, na_value=np.nan)
        except (TypeError, ValueError) as e:
            raise ShapeError(f"Non-numeric values in column '{value}': {e}") from e
        unique = unique.assign(**{value: numeric})

        wide = unique.pivot(index=row_key, columns=column_key, values=value)
        wide = wide.reindex(
            index=pd.unique(unique[row_key]), columns=pd.unique(unique[column_key])
        )
        wide.index.name = row_key
        wide.columns.name = None
        return wide

    def unpivot(
        self,
        wide: pd.DataFrame,
        row_key: str = SAMPLE_COL,
        column_key: str = GENE_COL,
        value: str = COUNT_COL,
    ) -> pd.DataFrame:
        """Long records of the defined cells of a wide table"""
        long = wide.rename_axis(index=row_key).reset_index().melt(
            id_vars=row_key, var_name=column_key, value_name=value
        )
        return long.dropna(subset=[value]).reset_index(drop=True)

    def to_feature_matrix(
        self,
        records: pd.DataFrame,
        sample_types: Optional[Sequence[str]] = None,
    ) -> FeatureMatrix:
        """
        Build a FeatureMatrix from ExpressionRecords.

        Args:
            records: Expression query result
            sample_types: Optional TCGA sample type codes to keep

        Returns:
            FeatureMatrix: Samples x genes plus the sample -> participant mapping

        Raises:
            ShapeError: If reshaping fails or a sample maps to several participants
        """
        try:
            missing = [
                c for c in (PARTICIPANT_COL, SAMPLE_COL) if c not in records.columns
            ]
            if missing:
                raise ShapeError(f"Missing columns for reshape: {missing}")

            if sample_types:
                keep = records[SAMPLE_COL].map(sample_type_code).isin(sample_types)
                self.logger.log_step(
                    "Sample type filter",
                    f"Keeping {int(keep.sum())} of {len(records)} records with types {list(sample_types)}",
                )
                records = records.loc[keep]

            mapping = records[[SAMPLE_COL, PARTICIPANT_COL]].drop_duplicates()
            conflicting = mapping[SAMPLE_COL].duplicated(keep=False)
            if conflicting.any():
                raise ShapeError(
                    "Samples mapped to several participants: "
                    f"{sorted(mapping.loc[conflicting, SAMPLE_COL].unique())}"
                )

            values = self.pivot(records)
            participants = mapping.set_index(SAMPLE_COL)[PARTICIPANT_COL].reindex(
                values.index
            )
            matrix = FeatureMatrix(values=values, participants=participants)

            multi = {
                p: s for p, s in matrix.samples_by_participant().items() if len(s) > 1
            }
            if multi:
                self.logger.log_step(
                    "Reshape",
                    f"{len(multi)} participants contribute more than one sample",
                )
            self.logger.log_matrix_shape("Feature matrix", matrix.shape)
            return matrix

        except ShapeError as e:
            self.logger.log_error(e, "Reshaping expression records")
            raise
