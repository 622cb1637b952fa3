"""
Data Loader Module
==================

Loads a customer CSV into an ordered list of string-valued records.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd
from loguru import logger

from config import get_config
from churnstream.exceptions import (
    DatasetNotFoundError,
    DegenerateDatasetError,
    MalformedDatasetError,
)


class DatasetLoader:
    """Load and validate customer datasets."""

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize DatasetLoader.

        Args:
            config: Configuration dictionary. If None, loads from config.yaml
        """
        self.config = config or get_config()
        self.data_config = self.config.get("data", {})

    def load_frame(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Load a CSV file with every column kept as a trimmed string.

        Args:
            path: Path to the CSV file

        Returns:
            DataFrame of strings, missing cells as ""

        Raises:
            DatasetNotFoundError: If the file does not exist
            MalformedDatasetError: If the file cannot be read or parsed
        """
        file_path = Path(path).resolve()

        if not file_path.is_file():
            logger.error(f"Data file not found: {file_path}")
            raise DatasetNotFoundError(file_path)

        logger.info(f"Loading data from {file_path}")

        try:
            df = pd.read_csv(
                file_path,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except pd.errors.EmptyDataError:
            raise MalformedDatasetError(file_path, "file is empty")
        except pd.errors.ParserError as e:
            raise MalformedDatasetError(file_path, str(e))
        except (UnicodeDecodeError, OSError) as e:
            raise MalformedDatasetError(file_path, str(e))

        df.columns = [str(col).strip() for col in df.columns]
        df = df.fillna("")
        for col in df.columns:
            df[col] = df[col].str.strip()

        logger.info(f"Loaded {len(df)} rows and {len(df.columns)} columns")
        return df

    def load_records(
        self,
        path: Union[str, Path],
        require_rows: bool = False
    ) -> List[Dict[str, str]]:
        """
        Load a dataset as a list of column -> value records in file order.

        Args:
            path: Path to the CSV file
            require_rows: Raise DegenerateDatasetError when no rows parse

        Returns:
            List of records
        """
        df = self.load_frame(path)

        if require_rows and df.empty:
            raise DegenerateDatasetError(path)

        return df.to_dict(orient="records")

    def validate_records(self, records: List[Dict[str, str]]) -> dict:
        """
        Summarize dataset quality.

        Args:
            records: Loaded records

        Returns:
            Dictionary with validation results
        """
        columns = list(records[0].keys()) if records else []
        target_col = self.data_config.get("target_column", "churn")

        results = {
            "total_rows": len(records),
            "total_columns": len(columns),
            "empty_values": {
                col: sum(1 for record in records if record.get(col, "") == "")
                for col in columns
            },
        }

        if target_col in columns:
            positives = sum(
                1 for record in records
                if str(record.get(target_col, "")).strip().lower() == "true"
            )
            results["target_distribution"] = {1: positives, 0: len(records) - positives}

        return results
