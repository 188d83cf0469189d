"""Unit tests for SQL construction."""

import pytest

from hpv_expression.domain.models import CohortSpec, TableRef
from hpv_expression.domain.services.query_builder import QueryBuilder

CLINICAL = TableRef("isb-cgc", "tcga_201607_beta", "Clinical_data")
EXPRESSION = TableRef("isb-cgc", "tcga_201607_beta", "mRNA_UNC_HiSeq_RSEM")
OVERLAP = TableRef("isb-cgc-02-0001", "Workshop", "HPV_integration_genes")
COHORT = CohortSpec(("CESC", "HNSC"))


@pytest.fixture
def builder():
    return QueryBuilder()


class TestTableRef:
    def test_parse_and_format(self):
        ref = TableRef.parse("isb-cgc:tcga_201607_beta.Clinical_data")
        assert ref == CLINICAL
        assert str(ref) == "isb-cgc:tcga_201607_beta.Clinical_data"
        assert ref.sql == "`isb-cgc.tcga_201607_beta.Clinical_data`"

    @pytest.mark.parametrize(
        "name", ["isb-cgc.tcga.Clinical", "isb-cgc:tcga", ":tcga.Clinical", "p:d."]
    )
    def test_parse_rejects_malformed(self, name):
        with pytest.raises(ValueError):
            TableRef.parse(name)


class TestCohortSpec:
    def test_deduplicates_preserving_order(self):
        assert CohortSpec(("HNSC", "CESC", "HNSC")).codes == ("HNSC", "CESC")

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            CohortSpec(())
        with pytest.raises(ValueError):
            CohortSpec(("CESC", " "))


class TestQueryBuilder:
    def test_select(self, builder):
        sql = builder.select(CLINICAL, ["ParticipantBarcode", "hpv_status"], COHORT)
        assert sql.startswith("SELECT\n  ParticipantBarcode,\n  hpv_status\n")
        assert "FROM `isb-cgc.tcga_201607_beta.Clinical_data`" in sql
        assert sql.endswith("WHERE\n  Study IN ('CESC', 'HNSC')")

    def test_select_distinct_with_exclusion(self, builder):
        sql = builder.gene_overlap_query(OVERLAP, COHORT)
        assert "FROM `isb-cgc-02-0001.Workshop.HPV_integration_genes`" in sql
        assert "Overlap_Gene != 'Intergenic'" in sql
        assert "GROUP BY\n  Overlap_Gene,\n  Study" in sql

    def test_join_matches_on_gene_and_study(self, builder):
        sql = builder.expression_query(EXPRESSION, OVERLAP, COHORT)
        assert "FROM `isb-cgc.tcga_201607_beta.mRNA_UNC_HiSeq_RSEM` AS expr" in sql
        assert "ON expr.HGNC_gene_symbol = genes.Overlap_Gene" in sql
        assert "AND expr.Study = genes.Study" in sql
        assert "expr.Study IN ('CESC', 'HNSC')" in sql
        assert "expr.normalized_count" in sql
        # The cohort filter applies to both sides of the join
        assert sql.count("IN ('CESC', 'HNSC')") == 2

    def test_join_leaves_out_intergenic_sites(self, builder):
        sql = builder.expression_query(EXPRESSION, OVERLAP, COHORT)
        subquery = sql.split("JOIN (", 1)[1].split(") AS genes", 1)[0]

        assert "Overlap_Gene != 'Intergenic'" in subquery
        assert "Study IN ('CESC', 'HNSC')" in subquery

    def test_join_without_exclusion(self, builder):
        sql = builder.join_on_gene_and_study(
            EXPRESSION, OVERLAP, ["SampleBarcode"], COHORT
        )
        assert "Intergenic" not in sql

    def test_clinical_query_columns(self, builder):
        sql = builder.clinical_query(CLINICAL, COHORT)
        for column in ("ParticipantBarcode", "Study", "hpv_calls", "hpv_status"):
            assert column in sql

    def test_is_pure(self, builder):
        assert builder.expression_query(EXPRESSION, OVERLAP, COHORT) == builder.expression_query(
            EXPRESSION, OVERLAP, COHORT
        )

    @pytest.mark.parametrize("columns", [[], ["bad column"], ["1abc"], ["x;DROP"]])
    def test_rejects_bad_columns(self, builder, columns):
        with pytest.raises(ValueError):
            builder.select(CLINICAL, columns, COHORT)

    def test_rejects_quoted_study_code(self, builder):
        with pytest.raises(ValueError):
            builder.select(CLINICAL, ["Study"], CohortSpec(("CE'SC",)))

    def test_rejects_empty_table_part(self):
        with pytest.raises(ValueError):
            TableRef("isb-cgc", "", "Clinical_data")
