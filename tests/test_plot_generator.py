"""Tests for box and volcano plots."""

import os

import pandas as pd
import pytest

from hpv_expression.domain.services.cohort_aligner import CohortAligner
from hpv_expression.domain.services.differential_tester import DifferentialTester
from hpv_expression.domain.services.result_reshaper import ResultReshaper
from hpv_expression.presentation.visualization.plot_generator import PlotGenerator


@pytest.fixture
def analysis(clinical_df, expression_df):
    matrix = ResultReshaper().to_feature_matrix(expression_df)
    aligned = CohortAligner().align(clinical_df, matrix)
    ranked, _ = DifferentialTester().rank_genes(aligned)
    return aligned, ranked


def test_select_genes_adds_genes_of_interest():
    ranked = pd.DataFrame({"p_value": [0.01, 0.2]}, index=["G1", "G2"])
    generator = PlotGenerator()

    genes = generator.select_genes(ranked, ["G1", "G2", "G3"], 1, ["G3", "G1", "MISSING"])

    assert genes == ["G1", "G3"]


def test_boxplots_written_in_all_formats(tmp_path, analysis):
    aligned, ranked = analysis

    paths = PlotGenerator().create_gene_boxplots(
        aligned, ranked, str(tmp_path), top_k=1, genes_of_interest=["GENE_C"]
    )

    assert paths == [
        str(tmp_path / "GENE_A_boxplot.png"),
        str(tmp_path / "GENE_C_boxplot.png"),
    ]
    for ext in ("png", "pdf", "svg"):
        assert os.path.exists(tmp_path / f"GENE_A_boxplot.{ext}")


def test_volcano_plot(tmp_path, analysis):
    _, ranked = analysis
    output = str(tmp_path / "volcano.png")

    PlotGenerator().create_volcano_plot(ranked, output)

    assert os.path.exists(output)


def test_volcano_plot_skips_empty_table(tmp_path):
    output = str(tmp_path / "volcano.png")
    empty = pd.DataFrame(columns=["p_value", "log2_fold_change"])

    PlotGenerator().create_volcano_plot(empty, output)

    assert not os.path.exists(output)
