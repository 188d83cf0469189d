"""
Centralized logging for the HPV expression pipeline.
"""

import logging
import os
from typing import Optional

LOGGER_NAME = "hpv_expression"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Logger:
    """Centralized logging for the HPV expression pipeline"""

    def __init__(self, log_file: Optional[str] = None, level: int = logging.INFO):
        """Initialize logger with optional file output"""
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(level)

        formatter = logging.Formatter(LOG_FORMAT)

        # Services each build a Logger; attach the console handler only once
        if not any(
            type(handler) is logging.StreamHandler for handler in self.logger.handlers
        ):
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_file and not any(
            isinstance(handler, logging.FileHandler)
            and handler.baseFilename == os.path.abspath(log_file)
            for handler in self.logger.handlers
        ):
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def log_step(self, step: str, details: str) -> None:
        """Log a processing step with details"""
        self.logger.info(f"🔍 {step}: {details}")

    def log_error(self, error: Exception, context: str) -> None:
        """Log an error with context"""
        self.logger.error(f"❌ Error in {context}: {str(error)}", exc_info=True)

    def log_warning(self, warning: str) -> None:
        """Log a warning message"""
        self.logger.warning(f"⚠️ {warning}")

    def log_success(self, message: str) -> None:
        """Log a success message"""
        self.logger.info(f"✅ {message}")

    def log_save(self, file_path: str) -> None:
        """Log a file save operation"""
        self.logger.info(f"💾 Saved to: {file_path}")

    def log_query(self, description: str, sql: str) -> None:
        """Log a query before it is sent"""
        self.logger.info(f"📡 {description}")
        self.logger.debug(sql)

    def log_matrix_shape(self, matrix_name: str, shape: tuple) -> None:
        """Log matrix shape information"""
        self.logger.info(f"📊 {matrix_name} shape: {shape}")

    def log_statistics(self, stat_name: str, value: float) -> None:
        """Log statistical values"""
        self.logger.info(f"📈 {stat_name}: {value:.6g}")
