"""
Visualization services for the HPV expression pipeline.
"""

import os
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from typing import List, Optional, Sequence

from hpv_expression.domain.models import (
    HPV_STATUS_COL,
    NEGATIVE,
    POSITIVE,
    AlignedCohort,
)
from hpv_expression.infrastructure.logger import Logger

PLOT_FORMATS = ["pdf", "svg", "png"]


class PlotGenerator:
    """Visualization and plotting services"""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger if logger is not None else Logger()

    def _save(self, fig, output_path: str) -> None:
        """Save a figure in every plot format next to output_path (a .png path)"""
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        for ext in PLOT_FORMATS:
            fig.savefig(output_path.replace(".png", f".{ext}"))
        plt.close(fig)
        self.logger.log_save(output_path)

    def select_genes(
        self,
        ranked: pd.DataFrame,
        available: Sequence[str],
        top_k: int,
        genes_of_interest: Sequence[str] = (),
    ) -> List[str]:
        """Top-k ranked genes followed by any extra genes of interest in the matrix"""
        genes = list(ranked.index[: max(top_k, 0)])
        for gene in genes_of_interest:
            if gene not in available:
                self.logger.log_warning(f"Gene of interest {gene} not in feature matrix")
            elif gene not in genes:
                genes.append(gene)
        return genes

    def create_gene_boxplot(
        self,
        cohort: AlignedCohort,
        gene: str,
        output_path: str,
        p_value: Optional[float] = None,
    ) -> None:
        """
        Create a box plot with overlaid points for one gene by HPV status.

        Args:
            cohort: Aligned matrix and labels
            gene: Gene column to plot
            output_path: Output .png path (pdf and svg are written alongside)
            p_value: Optional p-value shown in the title
        """
        df = pd.DataFrame(
            {
                gene: cohort.matrix.values[gene],
                HPV_STATUS_COL: cohort.labels,
            }
        ).dropna()
        order = [label for label in (NEGATIVE, POSITIVE) if label in set(df[HPV_STATUS_COL])]

        fig, ax = plt.subplots(figsize=(5, 6))
        sns.boxplot(data=df, x=HPV_STATUS_COL, y=gene, order=order, ax=ax, showfliers=False)
        sns.stripplot(
            data=df, x=HPV_STATUS_COL, y=gene, order=order, ax=ax,
            color="black", alpha=0.5, size=3, jitter=True,
        )
        title = gene if p_value is None else f"{gene} (p = {p_value:.2e})"
        ax.set_title(title)
        ax.set_xlabel("HPV status")
        ax.set_ylabel("Normalized count")
        fig.tight_layout()

        self._save(fig, output_path)

    def create_gene_boxplots(
        self,
        cohort: AlignedCohort,
        ranked: pd.DataFrame,
        output_dir: str,
        top_k: int = 5,
        genes_of_interest: Sequence[str] = (),
    ) -> List[str]:
        """
        Create box plots for the top-ranked genes and genes of interest.

        Returns:
            List[str]: Paths of the .png files written
        """
        genes = self.select_genes(ranked, cohort.matrix.genes, top_k, genes_of_interest)
        paths = []
        for gene in genes:
            output_path = os.path.join(output_dir, f"{gene}_boxplot.png")
            p_value = ranked["p_value"].get(gene) if gene in ranked.index else None
            self.create_gene_boxplot(cohort, gene, output_path, p_value)
            paths.append(output_path)

        self.logger.log_step("Visualization", f"Created {len(paths)} gene box plots")
        return paths

    def create_volcano_plot(
        self, ranked: pd.DataFrame, output_path: str, alpha: float = 0.05
    ) -> None:
        """Log2 fold change against -log10 p-value with a Bonferroni line"""
        if ranked.empty:
            self.logger.log_warning("No ranked genes, skipping volcano plot")
            return

        significance = -np.log10(ranked["p_value"].clip(lower=1e-300))
        cutoff = -np.log10(alpha / len(ranked))
        colors = np.where(
            significance > cutoff,
            np.where(ranked["log2_fold_change"] > 0, "red", "blue"),
            "gray",
        )

        fig, ax = plt.subplots(figsize=(7, 6))
        ax.scatter(ranked["log2_fold_change"], significance, c=colors, s=12)
        ax.axhline(cutoff, color="black", linestyle="--", linewidth=0.8)
        for gene in ranked.index[significance > cutoff]:
            ax.annotate(
                gene, (ranked.at[gene, "log2_fold_change"], significance[gene]), fontsize=7
            )
        ax.set_xlabel("log2 fold change (Positive / Negative)")
        ax.set_ylabel("-log10 p-value")
        ax.set_title("HPV status differential expression")
        fig.tight_layout()

        self._save(fig, output_path)
