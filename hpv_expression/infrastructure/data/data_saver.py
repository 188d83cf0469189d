"""
Data saving functionality for the HPV expression pipeline.
"""

import os
from typing import List

import pandas as pd

from hpv_expression.domain.models import (
    HPV_STATUS_COL,
    PARTICIPANT_COL,
    AnalysisConfig,
    AnalysisResult,
    FeatureMatrix,
)
from hpv_expression.infrastructure.logger import Logger


class AnalysisDataSaver:
    """Responsible for saving intermediate tables and results"""

    def __init__(self):
        self.logger = Logger()

    def save_table(self, df: pd.DataFrame, file_path: str, index: bool = False) -> None:
        """
        Save a table to CSV file.

        Args:
            df: Table to save
            file_path: Output file path
            index: Whether to write the index
        """
        try:
            os.makedirs(os.path.dirname(file_path) or ".", exist_ok=True)
            df.to_csv(file_path, index=index, float_format="%.8g")
            self.logger.log_save(file_path)

        except Exception as e:
            self.logger.log_error(e, f"Saving table to {file_path}")
            raise

    def save_feature_matrix(self, matrix: FeatureMatrix, file_path: str) -> None:
        """Save the matrix with its participant column in front"""
        df = matrix.values.copy()
        df.insert(0, PARTICIPANT_COL, matrix.participants)
        self.save_table(df, file_path, index=True)

    def save_results(self, result: AnalysisResult, config: AnalysisConfig) -> None:
        """
        Save all analysis results to files.

        Args:
            result: Analysis result
            config: Analysis configuration
        """
        try:
            self.save_table(result.clinical, os.path.join(config.out_dir, "clinical.csv"))
            self.save_table(
                result.gene_overlap, os.path.join(config.out_dir, "gene_overlap.csv")
            )
            self.save_feature_matrix(
                result.feature_matrix,
                os.path.join(config.out_dir, "feature_matrix.csv"),
            )
            self.save_table(
                result.aligned.labels.rename(HPV_STATUS_COL).to_frame(),
                os.path.join(config.out_dir, "aligned_labels.csv"),
                index=True,
            )
            self.save_table(
                result.ranked_genes,
                os.path.join(config.out_dir, "ranked_genes.csv"),
                index=True,
            )
            self.save_summary(result, config)

            self.logger.log_success("All results saved successfully")

        except Exception as e:
            self.logger.log_error(e, "Saving results")
            raise

    def save_summary(self, result: AnalysisResult, config: AnalysisConfig) -> None:
        """Write a plain-text run summary"""
        file_path = os.path.join(config.out_dir, "summary.txt")
        lines: List[str] = [
            "HPV Expression Analysis Summary",
            "===============================",
            f"Billing project: {config.cloud_project_main}",
            f"Cohort: {', '.join(config.study)}",
            f"Clinical participants: {len(result.clinical)}",
            f"Integration-site genes: {len(result.gene_overlap)}",
            f"Feature matrix shape: {result.feature_matrix.shape}",
            f"Aligned matrix shape: {result.aligned.matrix.shape}",
            f"Group sizes: {result.aligned.group_counts()}",
            f"Test: {'Student' if config.equal_var else 'Welch'} two-sided t-test",
            f"Genes ranked: {len(result.ranked_genes)}",
            f"Genes skipped: {len(result.skipped_genes)}",
        ]
        if result.skipped_genes:
            lines.append(f"Skipped: {', '.join(result.skipped_genes)}")

        top = result.ranked_genes.head(config.top_k)
        if not top.empty:
            lines.append("")
            lines.append(f"Top {len(top)} genes:")
            for gene, row in top.iterrows():
                lines.append(
                    f"  {gene}\tp={row['p_value']:.3g}\tq={row['q_value']:.3g}"
                    f"\tlog2FC={row['log2_fold_change']:.3f}"
                )

        try:
            os.makedirs(config.out_dir, exist_ok=True)
            with open(file_path, "w") as f:
                f.write("\n".join(lines) + "\n")
            self.logger.log_save(file_path)
        except OSError as e:
            self.logger.log_error(e, f"Saving summary to {file_path}")
            raise
