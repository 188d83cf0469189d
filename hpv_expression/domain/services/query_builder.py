"""
SQL construction for the ISB-CGC BigQuery tables used by the pipeline.
"""

import re
from typing import Optional, Sequence, Tuple

from hpv_expression.domain.models import (
    COUNT_COL,
    GENE_COL,
    HPV_CALLS_COL,
    HPV_STATUS_COL,
    INTERGENIC,
    OVERLAP_GENE_COL,
    PARTICIPANT_COL,
    SAMPLE_COL,
    STUDY_COL,
    CohortSpec,
    TableRef,
)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

CLINICAL_COLUMNS = (PARTICIPANT_COL, STUDY_COL, HPV_CALLS_COL, HPV_STATUS_COL)
EXPRESSION_COLUMNS = (PARTICIPANT_COL, SAMPLE_COL, STUDY_COL, GENE_COL, COUNT_COL)


def _check_identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid column identifier: {name!r}")
    return name


def _check_columns(columns: Sequence[str]) -> Tuple[str, ...]:
    if not columns:
        raise ValueError("At least one column is required")
    return tuple(_check_identifier(column) for column in columns)


def _literal(value: str) -> str:
    if not isinstance(value, str) or not value or "'" in value or "\\" in value:
        raise ValueError(f"Invalid string literal: {value!r}")
    return f"'{value}'"


class QueryBuilder:
    """Builds standard-SQL query strings filtered by a study cohort"""

    def __init__(self, study_column: str = STUDY_COL):
        self.study_column = _check_identifier(study_column)

    def cohort_filter(self, cohort: CohortSpec, alias: Optional[str] = None) -> str:
        """IN-list predicate restricting rows to the cohort's study codes"""
        column = f"{alias}.{self.study_column}" if alias else self.study_column
        codes = ", ".join(_literal(code) for code in cohort)
        return f"{column} IN ({codes})"

    def _predicates(
        self, cohort: CohortSpec, exclude: Optional[Tuple[str, str]] = None
    ):
        predicates = [self.cohort_filter(cohort)]
        if exclude is not None:
            exclude_column, exclude_value = exclude
            predicates.append(
                f"{_check_identifier(exclude_column)} != {_literal(exclude_value)}"
            )
        return predicates

    def select(
        self, table: TableRef, columns: Sequence[str], cohort: CohortSpec
    ) -> str:
        """Filtered selection of columns from one table"""
        columns = _check_columns(columns)
        return "\n".join(
            [
                "SELECT",
                "  " + ",\n  ".join(columns),
                f"FROM {table.sql}",
                "WHERE",
                f"  {self.cohort_filter(cohort)}",
            ]
        )

    def select_distinct(
        self,
        table: TableRef,
        columns: Sequence[str],
        cohort: CohortSpec,
        exclude: Optional[Tuple[str, str]] = None,
    ) -> str:
        """
        Filtered selection grouped on all selected columns.

        Args:
            table: Source table
            columns: Columns to select and group by
            cohort: Study cohort filter
            exclude: Optional (column, value) pair whose rows are left out

        Returns:
            str: SQL query
        """
        columns = _check_columns(columns)
        predicates = self._predicates(cohort, exclude)
        return "\n".join(
            [
                "SELECT",
                "  " + ",\n  ".join(columns),
                f"FROM {table.sql}",
                "WHERE",
                "  " + "\n  AND ".join(predicates),
                "GROUP BY",
                "  " + ",\n  ".join(columns),
            ]
        )

    def join_on_gene_and_study(
        self,
        left: TableRef,
        right: TableRef,
        columns: Sequence[str],
        cohort: CohortSpec,
        left_gene_column: str = GENE_COL,
        right_gene_column: str = OVERLAP_GENE_COL,
        exclude: Optional[Tuple[str, str]] = None,
    ) -> str:
        """
        Filtered join of two tables on (gene symbol, study code).

        The right table is reduced to its distinct (gene, study) pairs first so
        a gene listed several times does not multiply left rows.

        Args:
            left: Table whose columns are selected
            right: Table supplying the gene list
            columns: Columns of the left table to select
            cohort: Study cohort filter applied to both sides
            left_gene_column: Gene symbol column of the left table
            right_gene_column: Gene symbol column of the right table
            exclude: Optional (column, value) pair left out of the right table

        Returns:
            str: SQL query
        """
        columns = _check_columns(columns)
        left_gene_column = _check_identifier(left_gene_column)
        right_gene_column = _check_identifier(right_gene_column)
        study = self.study_column
        return "\n".join(
            [
                "SELECT",
                "  " + ",\n  ".join(f"expr.{column}" for column in columns),
                f"FROM {left.sql} AS expr",
                "JOIN (",
                f"  SELECT DISTINCT {right_gene_column}, {study}",
                f"  FROM {right.sql}",
                "  WHERE " + "\n    AND ".join(self._predicates(cohort, exclude)),
                ") AS genes",
                f"ON expr.{left_gene_column} = genes.{right_gene_column}",
                f"  AND expr.{study} = genes.{study}",
                "WHERE",
                f"  {self.cohort_filter(cohort, alias='expr')}",
            ]
        )

    def clinical_query(self, table: TableRef, cohort: CohortSpec) -> str:
        """Participant HPV calls and status"""
        return self.select(table, CLINICAL_COLUMNS, cohort)

    def gene_overlap_query(self, table: TableRef, cohort: CohortSpec) -> str:
        """Genes recurrently hit by HPV integration, intergenic sites left out"""
        return self.select_distinct(
            table,
            (OVERLAP_GENE_COL, self.study_column),
            cohort,
            exclude=(OVERLAP_GENE_COL, INTERGENIC),
        )

    def expression_query(
        self, expression: TableRef, overlap: TableRef, cohort: CohortSpec
    ) -> str:
        """Normalized counts of the integration-site genes"""
        return self.join_on_gene_and_study(
            expression,
            overlap,
            EXPRESSION_COLUMNS,
            cohort,
            exclude=(OVERLAP_GENE_COL, INTERGENIC),
        )
