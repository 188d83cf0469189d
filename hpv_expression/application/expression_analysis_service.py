"""
Main application service orchestrating the HPV expression pipeline.
"""

import os
from typing import Optional

from hpv_expression.domain.models import AnalysisConfig, AnalysisResult
from hpv_expression.infrastructure.logger import Logger
from hpv_expression.infrastructure.data.data_saver import AnalysisDataSaver
from hpv_expression.infrastructure.data.query_executor import BigQueryExecutor
from hpv_expression.domain.services.query_builder import QueryBuilder
from hpv_expression.domain.services.result_reshaper import ResultReshaper
from hpv_expression.domain.services.cohort_aligner import CohortAligner
from hpv_expression.domain.services.differential_tester import DifferentialTester
from hpv_expression.presentation.visualization.plot_generator import PlotGenerator


class ExpressionAnalysisService:
    """Main application service orchestrating the entire pipeline"""

    def __init__(
        self, config: AnalysisConfig, executor: Optional[BigQueryExecutor] = None
    ):
        self.config = config
        self.logger = Logger(config.log_file)

        # Initialize all services
        self.executor = executor
        self.query_builder = QueryBuilder()
        self.result_reshaper = ResultReshaper()
        self.cohort_aligner = CohortAligner()
        self.differential_tester = DifferentialTester(
            min_group_size=config.min_group_size, equal_var=config.equal_var
        )
        self.data_saver = AnalysisDataSaver()
        self.plot_generator = PlotGenerator(self.logger)

    def process(self) -> AnalysisResult:
        """
        Main processing pipeline.

        Returns:
            AnalysisResult: Complete analysis results
        """
        if self.executor is not None:
            return self._process(self.executor)

        with BigQueryExecutor(self.config.cloud_project_main) as executor:
            return self._process(executor)

    def _process(self, executor: BigQueryExecutor) -> AnalysisResult:
        config = self.config
        cohort = config.cohort
        self.logger.log_step(
            "Processing pipeline", f"Starting analysis of {', '.join(cohort)}"
        )

        # Step 1: Clinical HPV calls
        clinical = executor.run(
            self.query_builder.clinical_query(config.clinical_ref, cohort),
            f"Clinical query on {config.clinical_ref}",
        )
        self.cohort_aligner.validate_clinical(clinical)

        # Step 2: Integration-site genes
        gene_overlap = executor.run(
            self.query_builder.gene_overlap_query(config.overlap_ref, cohort),
            f"Gene overlap query on {config.overlap_ref}",
        )

        # Step 3: Expression of those genes
        expression = executor.run(
            self.query_builder.expression_query(
                config.expression_ref, config.overlap_ref, cohort
            ),
            f"Expression query on {config.expression_ref}",
        )

        # Step 4: Reshape to samples x genes
        self.logger.log_step("Reshape", "Pivoting expression records")
        feature_matrix = self.result_reshaper.to_feature_matrix(
            expression, sample_types=config.sample_types
        )

        # Step 5: Align labels with matrix rows
        aligned = self.cohort_aligner.align(clinical, feature_matrix)

        # Step 6: Per-gene tests
        ranked, skipped = self.differential_tester.rank_genes(aligned)

        result = AnalysisResult(
            clinical=clinical,
            gene_overlap=gene_overlap,
            feature_matrix=feature_matrix,
            aligned=aligned,
            ranked_genes=ranked,
            skipped_genes=skipped,
        )

        # Step 7: Save results
        self.logger.log_step("Result saving", "Saving all analysis results")
        self.data_saver.save_results(result, config)

        # Step 8: Plots
        self.logger.log_step("Visualization", "Creating plots")
        plots_dir = os.path.join(config.out_dir, "plots")
        result.plot_paths = self.plot_generator.create_gene_boxplots(
            aligned,
            ranked,
            plots_dir,
            top_k=config.top_k,
            genes_of_interest=config.genes_of_interest,
        )
        if not ranked.empty:
            volcano_path = os.path.join(plots_dir, "volcano.png")
            self.plot_generator.create_volcano_plot(ranked, volcano_path, config.alpha)
            result.plot_paths.append(volcano_path)

        self.logger.log_success("Processing pipeline completed successfully")
        return result
