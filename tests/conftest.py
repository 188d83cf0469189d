import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from hpv_expression.domain.models import AnalysisConfig


def _clinical_row(participant, study, call, status):
    return {
        "ParticipantBarcode": participant,
        "Study": study,
        "hpv_calls": call,
        "hpv_status": status,
    }


def _expression_row(participant, sample, study, gene, count):
    return {
        "ParticipantBarcode": participant,
        "SampleBarcode": sample,
        "Study": study,
        "HGNC_gene_symbol": gene,
        "normalized_count": count,
    }


@pytest.fixture
def clinical_df() -> pd.DataFrame:
    """Six participants: three Positive, two Negative, one Indeterminate."""
    return pd.DataFrame(
        [
            _clinical_row("TCGA-AA-0001", "CESC", "HPV16", "Positive"),
            _clinical_row("TCGA-AA-0002", "CESC", "HPV18", "Positive"),
            _clinical_row("TCGA-AA-0003", "HNSC", "HPV16", "Positive"),
            _clinical_row("TCGA-AA-0004", "CESC", None, "Negative"),
            _clinical_row("TCGA-AA-0005", "HNSC", None, "Negative"),
            _clinical_row("TCGA-AA-0006", "HNSC", "HPV33", "Indeterminate"),
        ]
    )


@pytest.fixture
def expression_df() -> pd.DataFrame:
    """
    Long expression records for GENE_A (higher in Positive), GENE_B (flat)
    and GENE_C (only measured in one Negative sample). Participant 0004 has a
    tumour and a normal sample.
    """
    samples = [
        ("TCGA-AA-0001", "TCGA-AA-0001-01A", "CESC", 50.0, 10.0),
        ("TCGA-AA-0002", "TCGA-AA-0002-01A", "CESC", 55.0, 11.0),
        ("TCGA-AA-0003", "TCGA-AA-0003-01A", "HNSC", 60.0, 9.0),
        ("TCGA-AA-0004", "TCGA-AA-0004-01A", "CESC", 5.0, 10.5),
        ("TCGA-AA-0004", "TCGA-AA-0004-11A", "CESC", 6.0, 9.5),
        ("TCGA-AA-0005", "TCGA-AA-0005-01A", "HNSC", 4.0, 10.0),
        ("TCGA-AA-0006", "TCGA-AA-0006-01A", "HNSC", 30.0, 10.0),
    ]
    rows = []
    for participant, sample, study, gene_a, gene_b in samples:
        rows.append(_expression_row(participant, sample, study, "GENE_A", gene_a))
        rows.append(_expression_row(participant, sample, study, "GENE_B", gene_b))
    rows.append(
        _expression_row("TCGA-AA-0005", "TCGA-AA-0005-01A", "HNSC", "GENE_C", 3.0)
    )
    return pd.DataFrame(rows)


@pytest.fixture
def overlap_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Overlap_Gene": ["GENE_A", "GENE_B", "GENE_C"],
            "Study": ["CESC", "CESC", "HNSC"],
        }
    )


@pytest.fixture
def config(tmp_path) -> AnalysisConfig:
    return AnalysisConfig(
        cloud_project_main="my-billing-project",
        out_dir=str(tmp_path / "out"),
        top_k=2,
        genes_of_interest=["GENE_B"],
    )


@pytest.fixture
def rng():
    return np.random.default_rng(0)
