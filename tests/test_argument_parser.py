"""Unit tests for command line parsing and the entry point."""

from unittest.mock import patch

import pytest

from hpv_expression.__main__ import main
from hpv_expression.domain.exceptions import ServiceError
from hpv_expression.infrastructure.argument_parser import ArgumentParser


def test_defaults(tmp_path):
    config = ArgumentParser().parse_arguments(
        ["-p", "billing", "-o", str(tmp_path / "out")]
    )

    assert config.cloud_project_main == "billing"
    assert config.study == ["CESC", "HNSC"]
    assert config.min_group_size == 2
    assert config.equal_var is False
    assert config.sample_types == []
    assert str(config.clinical_ref) == "isb-cgc:tcga_201607_beta.Clinical_data"
    assert (tmp_path / "out").is_dir()


def test_options(tmp_path):
    config = ArgumentParser().parse_arguments(
        [
            "--cloud-project-main", "billing",
            "--out-dir", str(tmp_path),
            "--study", "'CESC, HNSC, LUSC'",
            "--workshop-ds", "HPV",
            "--overlap-table", "genes",
            "-g", "TP63",
            "-g", "CDKN2A,SOX2",
            "--equal-var",
            "--sample-types", "01,06",
            "--top-k", "10",
        ]
    )

    assert config.study == ["CESC", "HNSC", "LUSC"]
    assert config.genes_of_interest == ["TP63", "CDKN2A", "SOX2"]
    assert config.equal_var is True
    assert config.sample_types == ["01", "06"]
    assert config.top_k == 10
    assert str(config.overlap_ref) == "isb-cgc-02-0001:HPV.genes"


def test_missing_required_argument_exits():
    with pytest.raises(SystemExit):
        ArgumentParser().parse_arguments(["-o", "out"])


def test_invalid_min_group_size(tmp_path):
    with pytest.raises(ValueError):
        ArgumentParser().parse_arguments(
            ["-p", "billing", "-o", str(tmp_path), "--min-group-size", "1"]
        )


def test_main_returns_one_on_failure(tmp_path):
    with patch(
        "hpv_expression.__main__.ExpressionAnalysisService"
    ) as service_cls:
        service_cls.return_value.process.side_effect = ServiceError("unreachable")

        assert main(["-p", "billing", "-o", str(tmp_path)]) == 1


def test_main_returns_zero_on_success(tmp_path):
    with patch(
        "hpv_expression.__main__.ExpressionAnalysisService"
    ) as service_cls:
        assert main(["-p", "billing", "-o", str(tmp_path)]) == 0
        service_cls.return_value.process.assert_called_once()
