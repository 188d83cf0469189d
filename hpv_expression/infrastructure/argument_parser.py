"""
Command line argument parsing and validation for the HPV expression pipeline.
"""

import argparse
import os
from typing import List, Optional, Sequence, Union

from hpv_expression.domain.models import AnalysisConfig
from hpv_expression.infrastructure.logger import Logger


class ArgumentParser:
    """Command line argument parsing and validation"""

    def __init__(self):
        self.logger = Logger()
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create and configure the argument parser"""
        defaults = AnalysisConfig(cloud_project_main="", out_dir="")
        parser = argparse.ArgumentParser(
            description="Find genes differentially expressed by HPV status in TCGA cohorts"
        )

        # Required arguments
        parser.add_argument(
            "-p", "--cloud-project-main",
            type=str,
            required=True,
            help="Google Cloud project billed for the queries"
        )
        parser.add_argument(
            "-o", "--out-dir",
            type=str,
            required=True,
            help="Output directory for saving results"
        )

        # Data sources
        parser.add_argument(
            "-s", "--study",
            type=str,
            default=",".join(defaults.study),
            help="Comma-separated TCGA study codes (default: CESC,HNSC)"
        )
        parser.add_argument(
            "--cloud-project-workshop",
            type=str,
            default=defaults.cloud_project_workshop,
            help=f"Project holding the HPV integration gene table (default: {defaults.cloud_project_workshop})"
        )
        parser.add_argument(
            "--tcga-project",
            type=str,
            default=defaults.tcga_project,
            help=f"Project holding the TCGA dataset (default: {defaults.tcga_project})"
        )
        parser.add_argument(
            "--tcga-ds",
            type=str,
            default=defaults.tcga_ds,
            help=f"TCGA dataset name (default: {defaults.tcga_ds})"
        )
        parser.add_argument(
            "--workshop-ds",
            type=str,
            default=defaults.workshop_ds,
            help=f"Supplementary dataset name (default: {defaults.workshop_ds})"
        )
        parser.add_argument(
            "--clinical-table",
            type=str,
            default=defaults.clinical_table,
            help=f"Clinical table name (default: {defaults.clinical_table})"
        )
        parser.add_argument(
            "--expression-table",
            type=str,
            default=defaults.expression_table,
            help=f"Expression table name (default: {defaults.expression_table})"
        )
        parser.add_argument(
            "--overlap-table",
            type=str,
            default=defaults.overlap_table,
            help=f"HPV integration gene table name (default: {defaults.overlap_table})"
        )

        # Analysis options
        parser.add_argument(
            "-k", "--top-k",
            type=int,
            default=defaults.top_k,
            help=f"Number of top-ranked genes to plot (default: {defaults.top_k})"
        )
        parser.add_argument(
            "-g", "--gene",
            dest="genes",
            action="append",
            default=[],
            help="Gene of interest to plot regardless of rank. Can be repeated."
        )
        parser.add_argument(
            "-m", "--min-group-size",
            type=int,
            default=defaults.min_group_size,
            help=f"Minimum non-missing samples per group to test a gene (default: {defaults.min_group_size})"
        )
        parser.add_argument(
            "--equal-var",
            action="store_true",
            help="Use Student's t-test instead of Welch's unequal-variance test"
        )
        parser.add_argument(
            "-t", "--sample-types",
            type=str,
            help="Comma-separated TCGA sample type codes to keep (e.g. '01' for primary tumour). Default: all."
        )
        parser.add_argument(
            "-a", "--alpha",
            type=float,
            default=defaults.alpha,
            help="Significance threshold for the Bonferroni line of the volcano plot (default: 0.05)"
        )
        parser.add_argument(
            "--log-file",
            type=str,
            help="Also write log messages to this file"
        )

        return parser

    def parse_arguments(self, argv: Optional[Sequence[str]] = None) -> AnalysisConfig:
        """Parse command line arguments and return AnalysisConfig"""
        args = self.parser.parse_args(argv)

        config = AnalysisConfig(
            cloud_project_main=args.cloud_project_main,
            out_dir=args.out_dir,
            study=self._parse_list(args.study),
            cloud_project_workshop=args.cloud_project_workshop,
            tcga_project=args.tcga_project,
            tcga_ds=args.tcga_ds,
            workshop_ds=args.workshop_ds,
            clinical_table=args.clinical_table,
            expression_table=args.expression_table,
            overlap_table=args.overlap_table,
            top_k=args.top_k,
            genes_of_interest=self._parse_list(args.genes),
            min_group_size=args.min_group_size,
            equal_var=args.equal_var,
            sample_types=self._parse_list(args.sample_types),
            alpha=args.alpha,
            log_file=args.log_file,
        )

        # Validate configuration
        if not self.validate_config(config):
            raise ValueError("Invalid configuration")

        return config

    def _parse_list(self, value: Union[str, List[str], None]) -> List[str]:
        """Parse comma-separated values from string or list input"""
        if value is None:
            return []

        if isinstance(value, str):
            value = [value]

        items = []
        for entry in value:
            entry = entry.strip('"').strip("'")
            items.extend(
                item.strip().strip('"').strip("'")
                for item in entry.split(",")
                if item.strip()
            )
        return items

    def validate_config(self, config: AnalysisConfig) -> bool:
        """Validate the analysis configuration"""
        try:
            os.makedirs(config.out_dir, exist_ok=True)

            if not config.study:
                self.logger.log_error(
                    ValueError("At least one study code is required"),
                    "Configuration validation"
                )
                return False

            if config.min_group_size < 2:
                self.logger.log_error(
                    ValueError(f"Minimum group size {config.min_group_size} is below 2"),
                    "Configuration validation"
                )
                return False

            if config.alpha <= 0 or config.alpha > 1:
                self.logger.log_warning(f"Alpha value {config.alpha} is outside expected range (0, 1]")

            if config.top_k < 0:
                self.logger.log_warning(f"Top-k {config.top_k} is negative, no ranked genes will be plotted")

            for code in config.sample_types:
                if len(code) != 2 or not code.isdigit():
                    self.logger.log_warning(f"Sample type '{code}' is not a two-digit TCGA code")

            self.logger.log_success("Configuration validation passed")
            return True

        except Exception as e:
            self.logger.log_error(e, "Configuration validation")
            return False
