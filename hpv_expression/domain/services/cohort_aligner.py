"""
Alignment of clinical HPV labels with feature matrix rows.
"""

import pandas as pd

from hpv_expression.domain.exceptions import AlignmentError, ClinicalDataError
from hpv_expression.domain.models import (
    HPV_CALLS_COL,
    HPV_STATUS_COL,
    INDETERMINATE,
    INFECTION_STATUSES,
    NEGATIVE,
    PARTICIPANT_COL,
    AlignedCohort,
    FeatureMatrix,
)
from hpv_expression.infrastructure.logger import Logger


class CohortAligner:
    """Joins clinical records to matrix rows through participant ids"""

    def __init__(self):
        self.logger = Logger()

    def validate_clinical(self, clinical: pd.DataFrame) -> None:
        """
        Check HPV statuses are known and that every participant without an
        HPV call is HPV Negative.

        Raises:
            ClinicalDataError: If any participant breaks either rule
        """
        missing = [
            c for c in (PARTICIPANT_COL, HPV_CALLS_COL, HPV_STATUS_COL)
            if c not in clinical.columns
        ]
        if missing:
            raise ClinicalDataError(f"Clinical table is missing columns: {missing}")

        invalid = clinical.loc[~clinical[HPV_STATUS_COL].isin(INFECTION_STATUSES)]
        if not invalid.empty:
            error = ClinicalDataError(
                f"{len(invalid)} participants have an HPV status outside "
                f"{list(INFECTION_STATUSES)}: "
                f"{dict(zip(invalid[PARTICIPANT_COL], invalid[HPV_STATUS_COL]))}"
            )
            self.logger.log_error(error, "Clinical consistency check")
            raise error

        no_call = clinical[HPV_CALLS_COL].isna()
        offending = clinical.loc[no_call & (clinical[HPV_STATUS_COL] != NEGATIVE)]
        if not offending.empty:
            error = ClinicalDataError(
                f"{len(offending)} participants have no HPV call but are not Negative: "
                f"{offending[PARTICIPANT_COL].tolist()}"
            )
            self.logger.log_error(error, "Clinical consistency check")
            raise error

        self.logger.log_success(
            f"Clinical consistency check passed for {len(clinical)} participants"
        )

    def align(self, clinical: pd.DataFrame, matrix: FeatureMatrix) -> AlignedCohort:
        """
        Restrict, order and filter clinical labels and matrix rows together.

        Args:
            clinical: Clinical records, one row per participant
            matrix: Feature matrix with its sample -> participant mapping

        Returns:
            AlignedCohort: Matrix and label vector sharing one sample index

        Raises:
            AlignmentError: On duplicate participants or a broken post-condition
        """
        try:
            duplicated = clinical[PARTICIPANT_COL].duplicated()
            if duplicated.any():
                raise AlignmentError(
                    "Duplicate participants in clinical table: "
                    f"{clinical.loc[duplicated, PARTICIPANT_COL].tolist()}"
                )

            # Step 1: restrict to participants present in the matrix
            present = set(matrix.participants.dropna())
            restricted = clinical.loc[clinical[PARTICIPANT_COL].isin(present)]
            self.logger.log_step(
                "Cohort alignment",
                f"{len(restricted)} of {len(clinical)} clinical participants have expression data",
            )

            # Step 2: one label per matrix row via the participant id
            status = restricted.set_index(PARTICIPANT_COL)[HPV_STATUS_COL]
            labels = matrix.participants.map(status)
            labels.name = HPV_STATUS_COL
            unmatched = labels.isna()
            if unmatched.any():
                self.logger.log_warning(
                    f"Dropping {int(unmatched.sum())} samples without clinical records"
                )

            # Step 3: drop unmatched and Indeterminate rows in lockstep
            keep = ~unmatched & (labels != INDETERMINATE)
            self.logger.log_step(
                "Cohort alignment",
                f"Removing {int((labels == INDETERMINATE).sum())} Indeterminate samples",
            )
            kept_index = labels.index[keep]
            aligned_matrix = FeatureMatrix(
                values=matrix.values.loc[kept_index],
                participants=matrix.participants.loc[kept_index],
            )
            aligned_labels = labels.loc[kept_index]

            if len(aligned_labels) != aligned_matrix.shape[0] or not (
                aligned_labels.index.equals(aligned_matrix.values.index)
                and aligned_matrix.participants.index.equals(aligned_labels.index)
            ):
                raise AlignmentError(
                    f"Aligned labels ({len(aligned_labels)}) do not match "
                    f"matrix rows ({aligned_matrix.shape[0]})"
                )

            aligned = AlignedCohort(matrix=aligned_matrix, labels=aligned_labels)
            self.logger.log_matrix_shape("Aligned matrix", aligned_matrix.shape)
            self.logger.log_step("Group sizes", str(aligned.group_counts()))
            return aligned

        except AlignmentError as e:
            self.logger.log_error(e, "Cohort alignment")
            raise
