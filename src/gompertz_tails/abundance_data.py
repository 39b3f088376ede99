"""
Abundance data loading utilities for the Gompertz Tails workshop.

Supports two-column CSV/TSV abundance series, e.g. extracts from the
Global Population Dynamics Database (GPDD).

Example CSV format:
    sample_year,population_untransformed
    1952,412
    1953,398
    1954,530
    ...

Rows are returned exactly as read: no sorting, filtering or gap filling.
"""
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List, Tuple
import warnings


CANONICAL_COLUMNS = ['year', 'abundance_index']


class AbundanceDataLoader:
    """Load and validate population abundance series."""

    def __init__(self, data_dir: str = 'data', verbose: bool = True):
        """
        Args:
            data_dir: Directory containing abundance CSV files
            verbose: Print a short report after each load
        """
        self.data_dir = Path(data_dir)
        self.verbose = verbose
        if not self.data_dir.exists():
            warnings.warn(f"Data directory does not exist: {self.data_dir}")

    def _resolve(self, filename: str) -> Path:
        return self.data_dir / filename if not Path(filename).is_absolute() else Path(filename)

    def load_abundance_csv(self, filename: str,
                           year_col: str = 'sample_year',
                           count_col: str = 'population_untransformed',
                           delimiter: str = ',') -> pd.DataFrame:
        """Load one abundance series and rename it to (year, abundance_index).

        Args:
            filename: Filename relative to data_dir, or absolute path.
            year_col: Name of the year/time column.
            count_col: Name of the untransformed population-count column.
            delimiter: Column delimiter (',', '\\t', ...).

        Returns:
            DataFrame with columns ['year', 'abundance_index'] in file order.

        Raises:
            FileNotFoundError: the file does not exist.
            ValueError: a required column is missing.
        """
        filepath = self._resolve(filename)

        if not filepath.exists():
            raise FileNotFoundError(f"Abundance file not found: {filepath}")

        _engine = 'python' if len(delimiter) > 1 else 'c'
        df = pd.read_csv(filepath, sep=delimiter, engine=_engine)

        missing = [c for c in (year_col, count_col) if c not in df.columns]
        if missing:
            raise ValueError(f"Column(s) {missing} not found in {filename}")

        series = df[[year_col, count_col]].rename(
            columns={year_col: 'year', count_col: 'abundance_index'}
        )
        series['year'] = series['year'].astype(np.int64)
        series['abundance_index'] = series['abundance_index'].astype(np.float64)
        series = series.reset_index(drop=True)

        if self.verbose:
            print(f"[Data] Loaded {filepath.name}: {len(series)} years")
            if len(series) > 0:
                print(f"  Years: {series['year'].iloc[0]} - {series['year'].iloc[-1]}")
                print(f"  Abundance range: {series['abundance_index'].min():.2f} - "
                      f"{series['abundance_index'].max():.2f}")

        return series

    def load_datasets(self, dataset_files: Dict[str, str],
                      **csv_kwargs) -> Dict[str, pd.DataFrame]:
        """Load several named series.

        Every file is read before anything is returned, so a missing file
        raises before any caller can start fitting.

        Args:
            dataset_files: Mapping of dataset name -> filename
            **csv_kwargs: Forwarded to load_abundance_csv()

        Returns:
            dict of dataset name -> series DataFrame (insertion order kept)
        """
        datasets = {}
        for name, filename in dataset_files.items():
            datasets[name] = self.load_abundance_csv(filename, **csv_kwargs)
        return datasets


def log_abundance(series: pd.DataFrame) -> np.ndarray:
    """Natural-log abundance vector, the observed `y` of the Gompertz model."""
    counts = series['abundance_index'].to_numpy(dtype=np.float64)
    if np.any(counts <= 0):
        raise ValueError("Abundance values must be positive to log-transform")
    return np.log(counts)


def series_records(series: pd.DataFrame) -> List[Tuple[int, float]]:
    """Return the series as a list of (year, abundance_index) tuples."""
    return [(int(y), float(a))
            for y, a in zip(series['year'], series['abundance_index'])]


def bundled_data_dir() -> Path:
    """Directory holding the example series shipped with the package."""
    return Path(__file__).resolve().parent / 'data'
