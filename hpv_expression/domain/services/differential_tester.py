"""
Per-gene differential expression testing between HPV status groups.
"""

from typing import Dict, List, Tuple

import numpy as np
import pandas as pd
from scipy.stats import ttest_ind
from statsmodels.stats.multitest import fdrcorrection

from hpv_expression.domain.exceptions import InsufficientDataError
from hpv_expression.domain.models import NEGATIVE, POSITIVE, AlignedCohort
from hpv_expression.infrastructure.logger import Logger

RANKED_COLUMNS = [
    "gene",
    "statistic",
    "p_value",
    "q_value",
    "n_positive",
    "n_negative",
    "mean_positive",
    "mean_negative",
    "log2_fold_change",
]


class DifferentialTester:
    """Two-sample t-tests per gene column, grouped by infection label"""

    def __init__(
        self,
        min_group_size: int = 2,
        equal_var: bool = False,
        positive_label: str = POSITIVE,
        negative_label: str = NEGATIVE,
    ):
        if min_group_size < 2:
            raise ValueError("min_group_size must be at least 2")
        self.logger = Logger()
        self.min_group_size = min_group_size
        self.equal_var = equal_var
        self.positive_label = positive_label
        self.negative_label = negative_label

    def test_gene(self, values: pd.Series, labels: pd.Series) -> Dict[str, float]:
        """
        Compare one gene between the positive and negative groups.

        Samples with an undefined value are left out for this gene only.

        Args:
            values: Expression values indexed like labels
            labels: Infection status per sample

        Returns:
            Dict[str, float]: statistic, p-value, group sizes and means

        Raises:
            InsufficientDataError: If either group has too few defined values
        """
        defined = values.notna()
        positive = values[defined & (labels == self.positive_label)].to_numpy()
        negative = values[defined & (labels == self.negative_label)].to_numpy()

        sizes = {self.positive_label: len(positive), self.negative_label: len(negative)}
        if min(sizes.values()) < self.min_group_size:
            raise InsufficientDataError(str(values.name), sizes, self.min_group_size)

        statistic, p_value = ttest_ind(positive, negative, equal_var=self.equal_var)
        mean_positive = float(np.mean(positive))
        mean_negative = float(np.mean(negative))
        return {
            "statistic": float(statistic),
            "p_value": float(p_value),
            "n_positive": len(positive),
            "n_negative": len(negative),
            "mean_positive": mean_positive,
            "mean_negative": mean_negative,
            "log2_fold_change": float(
                np.log2((mean_positive + 1) / (mean_negative + 1))
            ),
        }

    def rank_genes(self, cohort: AlignedCohort) -> Tuple[pd.DataFrame, List[str]]:
        """
        Test every gene and rank by ascending p-value.

        Genes that cannot be tested are logged and left out of the ranking.

        Args:
            cohort: Aligned matrix and labels

        Returns:
            Tuple[pd.DataFrame, List[str]]: Ranked gene table and skipped genes
        """
        values = cohort.matrix.values
        labels = cohort.labels
        if not values.index.equals(labels.index):
            raise ValueError("Matrix rows and labels must share the same index")

        rows = []
        skipped = []
        for gene in values.columns:
            try:
                result = self.test_gene(values[gene], labels)
            except InsufficientDataError as e:
                self.logger.log_warning(f"Skipping gene: {e}")
                skipped.append(gene)
                continue
            # Constant groups give NaN for equal means and inf / p=0 otherwise
            if not (np.isfinite(result["statistic"]) and np.isfinite(result["p_value"])):
                self.logger.log_warning(
                    f"Skipping gene {gene}: test undefined (zero variance in both groups)"
                )
                skipped.append(gene)
                continue
            rows.append({"gene": gene, **result})

        ranked = pd.DataFrame(rows, columns=RANKED_COLUMNS)
        if not ranked.empty:
            _, ranked["q_value"] = fdrcorrection(ranked["p_value"].to_numpy())
            ranked = ranked.sort_values("p_value", kind="mergesort")
        ranked = ranked.set_index("gene")

        self.logger.log_step(
            "Differential testing",
            f"Ranked {len(ranked)} genes, skipped {len(skipped)}",
        )
        if not ranked.empty:
            self.logger.log_statistics(
                f"Smallest p-value ({ranked.index[0]})", ranked["p_value"].iloc[0]
            )
        return ranked, skipped
