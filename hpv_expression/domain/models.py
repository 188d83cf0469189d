"""
Core domain models for the HPV expression pipeline.
Contains data structures for configuration, intermediate tables and results.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import pandas as pd

# Column names of the ISB-CGC TCGA tables
PARTICIPANT_COL = "ParticipantBarcode"
SAMPLE_COL = "SampleBarcode"
STUDY_COL = "Study"
HPV_CALLS_COL = "hpv_calls"
HPV_STATUS_COL = "hpv_status"
GENE_COL = "HGNC_gene_symbol"
COUNT_COL = "normalized_count"
OVERLAP_GENE_COL = "Overlap_Gene"

# Infection status categories
POSITIVE = "Positive"
NEGATIVE = "Negative"
INDETERMINATE = "Indeterminate"
INFECTION_STATUSES = (POSITIVE, NEGATIVE, INDETERMINATE)

INTERGENIC = "Intergenic"


@dataclass(frozen=True)
class TableRef:
    """BigQuery table reference written as project:dataset.table"""

    project: str
    dataset: str
    table: str

    def __post_init__(self):
        for part_name in ("project", "dataset", "table"):
            value = getattr(self, part_name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Table reference {part_name} must be non-empty")

    @classmethod
    def parse(cls, name: str) -> "TableRef":
        """Parse a 'project:dataset.table' string"""
        project, sep, rest = name.partition(":")
        dataset, dot, table = rest.partition(".")
        if not sep or not dot:
            raise ValueError(f"Expected 'project:dataset.table', got {name!r}")
        return cls(project, dataset, table)

    @property
    def sql(self) -> str:
        """Back-quoted standard SQL form"""
        return f"`{self.project}.{self.dataset}.{self.table}`"

    def __str__(self) -> str:
        return f"{self.project}:{self.dataset}.{self.table}"


@dataclass(frozen=True)
class CohortSpec:
    """Disease-study codes filtering every query of a session"""

    codes: Tuple[str, ...]

    def __post_init__(self):
        codes = tuple(dict.fromkeys(self.codes))
        if not codes:
            raise ValueError("Cohort must contain at least one study code")
        for code in codes:
            if not isinstance(code, str) or not code.strip():
                raise ValueError(f"Invalid study code: {code!r}")
        object.__setattr__(self, "codes", codes)

    def __iter__(self):
        return iter(self.codes)

    def __len__(self) -> int:
        return len(self.codes)


@dataclass
class AnalysisConfig:
    """Configuration for an HPV expression analysis session"""

    cloud_project_main: str
    out_dir: str
    study: List[str] = field(default_factory=lambda: ["CESC", "HNSC"])
    cloud_project_workshop: str = "isb-cgc-02-0001"
    tcga_project: str = "isb-cgc"
    tcga_ds: str = "tcga_201607_beta"
    workshop_ds: str = "Workshop"
    clinical_table: str = "Clinical_data"
    expression_table: str = "mRNA_UNC_HiSeq_RSEM"
    overlap_table: str = "HPV_integration_genes"
    top_k: int = 5
    genes_of_interest: List[str] = field(default_factory=list)
    min_group_size: int = 2
    equal_var: bool = False
    sample_types: List[str] = field(default_factory=list)
    alpha: float = 0.05
    log_file: Optional[str] = None

    @property
    def cohort(self) -> CohortSpec:
        return CohortSpec(tuple(self.study))

    @property
    def clinical_ref(self) -> TableRef:
        return TableRef(self.tcga_project, self.tcga_ds, self.clinical_table)

    @property
    def expression_ref(self) -> TableRef:
        return TableRef(self.tcga_project, self.tcga_ds, self.expression_table)

    @property
    def overlap_ref(self) -> TableRef:
        return TableRef(
            self.cloud_project_workshop, self.workshop_ds, self.overlap_table
        )


@dataclass
class FeatureMatrix:
    """Wide expression matrix: rows are samples, columns are genes"""

    values: pd.DataFrame
    # sample_id -> participant_id, same index order as values
    participants: pd.Series

    @property
    def sample_ids(self) -> List[str]:
        return list(self.values.index)

    @property
    def genes(self) -> List[str]:
        return list(self.values.columns)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def samples_by_participant(self) -> Dict[str, List[str]]:
        """One-to-many participant -> samples relation"""
        grouped: Dict[str, List[str]] = {}
        for sample_id, participant_id in self.participants.items():
            grouped.setdefault(participant_id, []).append(sample_id)
        return grouped


@dataclass
class AlignedCohort:
    """Feature matrix rows and infection labels sharing one sample index"""

    matrix: FeatureMatrix
    labels: pd.Series

    def group_counts(self) -> Dict[str, int]:
        return {str(k): int(v) for k, v in self.labels.value_counts().items()}


@dataclass
class AnalysisResult:
    """Result of an HPV expression analysis run"""

    clinical: pd.DataFrame
    gene_overlap: pd.DataFrame
    feature_matrix: FeatureMatrix
    aligned: AlignedCohort
    ranked_genes: pd.DataFrame
    skipped_genes: List[str]
    plot_paths: List[str] = field(default_factory=list)
