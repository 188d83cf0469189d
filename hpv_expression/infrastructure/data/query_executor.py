"""
BigQuery execution for the HPV expression pipeline.
"""

from typing import Optional

import pandas as pd
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import bigquery

from hpv_expression.domain.exceptions import ServiceError
from hpv_expression.infrastructure.logger import Logger


class BigQueryExecutor:
    """Runs SQL against BigQuery, billed to one project for the whole session"""

    def __init__(
        self, billing_project: str, client: Optional[bigquery.Client] = None
    ):
        if not billing_project:
            raise ValueError("A billing project id is required")
        self.billing_project = billing_project
        self.logger = Logger()
        self._client = client

    @property
    def client(self) -> bigquery.Client:
        if self._client is None:
            try:
                self._client = bigquery.Client(project=self.billing_project)
            except (GoogleAuthError, GoogleAPIError) as e:
                self.logger.log_error(e, "Creating BigQuery client")
                raise ServiceError(f"Could not create BigQuery client: {e}") from e
            self.logger.log_step(
                "BigQuery session", f"Opened for project {self.billing_project}"
            )
        return self._client

    def run(self, sql: str, description: str = "Query") -> pd.DataFrame:
        """
        Run a query and return its result table.

        Args:
            sql: Standard SQL query
            description: Short label used in log messages

        Returns:
            pd.DataFrame: Query result

        Raises:
            ServiceError: If the service rejects or fails the query
        """
        self.logger.log_query(description, sql)
        try:
            result = self.client.query(sql, project=self.billing_project).to_dataframe()
        except (GoogleAuthError, GoogleAPIError) as e:
            self.logger.log_error(e, description)
            raise ServiceError(f"{description} failed: {e}") from e

        self.logger.log_matrix_shape(f"{description} result", result.shape)
        return result

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self.logger.log_step("BigQuery session", "Closed")

    def __enter__(self) -> "BigQueryExecutor":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
