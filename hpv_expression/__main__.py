#!/usr/bin/env python3
"""
HPV Expression Pipeline - Main Entry Point

This module serves as the main entry point with zero business logic.
All processing is delegated to specialized services.
"""

import sys
from typing import Optional, Sequence

from hpv_expression.infrastructure.argument_parser import ArgumentParser
from hpv_expression.application.expression_analysis_service import ExpressionAnalysisService
from hpv_expression.infrastructure.logger import Logger


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point - no business logic"""
    logger = Logger()

    try:
        logger.log_step("Starting", "HPV Expression Pipeline")

        # Parse and validate arguments
        logger.log_step("Parsing", "Command line arguments")
        parser = ArgumentParser()
        config = parser.parse_arguments(argv)

        # Initialize and run analysis service
        logger.log_step("Initializing", "Analysis service")
        service = ExpressionAnalysisService(config)

        logger.log_step("Processing", "HPV expression analysis")
        result = service.process()

        logger.log_success(
            f"Processing completed successfully, {len(result.ranked_genes)} genes ranked"
        )
        print("✅ Processing completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.log_warning("Processing interrupted by user")
        print("⚠️ Processing interrupted by user")
        return 130

    except Exception as e:
        logger.log_error(e, "Main execution")
        print(f"❌ Processing failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
