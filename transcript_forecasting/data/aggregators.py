"""Time series aggregation for the transcript forecasting engine"""

from dataclasses import asdict, is_dataclass
from typing import Dict, Iterable, Optional, Union

import numpy as np
import pandas as pd

from transcript_forecasting.exceptions import ValidationError
from transcript_forecasting.types import AggregatedSeries, TimeSeriesPoint
from transcript_forecasting.utils.logging_config import get_logger
from transcript_forecasting.utils.periods import (
    is_valid_period_key,
    months_between,
    next_period_keys,
)


logger = get_logger(__name__)

RECORD_COLUMNS = ['period_key', 'entity_id', 'value']

Records = Union[pd.DataFrame, Iterable[Union[TimeSeriesPoint, dict]]]


def records_to_frame(records: Records) -> pd.DataFrame:
    """
    Normalize raw records into a DataFrame with the record columns

    Accepts a DataFrame, TimeSeriesPoint instances or plain mappings with
    period_key, entity_id and value.

    Args:
        records: Raw count records

    Returns:
        DataFrame with columns period_key, entity_id, value

    Raises:
        ValidationError: If columns are missing or period keys are malformed
    """
    if isinstance(records, pd.DataFrame):
        df = records.copy()
    else:
        rows = [asdict(r) if is_dataclass(r) else dict(r) for r in records]
        df = pd.DataFrame(rows, columns=RECORD_COLUMNS if not rows else None)

    missing_columns = [col for col in RECORD_COLUMNS if col not in df.columns]
    if missing_columns:
        raise ValidationError([f"Records are missing columns: {missing_columns}"])

    df = df[RECORD_COLUMNS].copy()
    df['period_key'] = df['period_key'].astype(str)
    df['entity_id'] = df['entity_id'].astype(str)
    df['value'] = pd.to_numeric(df['value'], errors='coerce')

    if df.empty:
        return df

    bad_keys = df.loc[~df['period_key'].map(is_valid_period_key), 'period_key']
    if len(bad_keys) > 0:
        raise ValidationError(
            [f"Invalid period keys (expected YYYY-MM): {sorted(set(bad_keys))[:5]}"]
        )

    if df['value'].isna().any():
        raise ValidationError(
            [f"{int(df['value'].isna().sum())} records have a non-numeric value"]
        )

    return df


class TimeSeriesAggregator:
    """
    Aggregate raw count records to monthly level

    Handles:
    - Period-level totals (all entities summed)
    - Entity-level totals
    - Entity filtering
    - Gap filling between observed months
    """

    def __init__(self, config: Dict = None):
        """
        Initialize aggregator

        Args:
            config: Configuration dictionary
        """
        self.config = config if config else {}

    def filter_entity(self, records: Records, entity_id: Optional[str]) -> pd.DataFrame:
        """Keep only the records of one entity (all records when entity_id is None)"""
        df = records_to_frame(records)

        if entity_id is None:
            return df

        return df[df['entity_id'] == str(entity_id)].reset_index(drop=True)

    def aggregate_by_period(self, records: Records) -> AggregatedSeries:
        """
        Sum values sharing a period key

        Args:
            records: Raw count records

        Returns:
            AggregatedSeries sorted ascending by period key
        """
        df = records_to_frame(records)

        if df.empty:
            return AggregatedSeries()

        totals = df.groupby('period_key')['value'].sum().sort_index()

        logger.debug(f"Aggregated {len(df):,} records to {len(totals)} periods")

        return AggregatedSeries.from_pairs(totals.items())

    def aggregate_by_entity(self, records: Records) -> Dict[str, float]:
        """
        Sum values per entity

        Args:
            records: Raw count records

        Returns:
            Mapping entity_id -> total, ordered by entity_id
        """
        df = records_to_frame(records)

        if df.empty:
            return {}

        totals = df.groupby('entity_id')['value'].sum().sort_index()
        return {str(k): float(v) for k, v in totals.items()}

    def fill_missing_periods(self, series: AggregatedSeries) -> AggregatedSeries:
        """
        Insert absent months between the first and last period

        Missing totals are linearly interpolated between the neighbouring
        observed months and rounded to whole counts.

        Args:
            series: Aggregated series, possibly with gaps

        Returns:
            Series with one entry per consecutive month
        """
        if len(series) < 2:
            return series

        span = months_between(series.period_keys[0], series.last_period_key)
        all_keys = [series.period_keys[0]] + next_period_keys(series.period_keys[0], span)

        if len(all_keys) == len(series):
            return series

        observed = pd.Series(series.values, index=series.period_keys)
        filled = observed.reindex(all_keys)
        interpolated = filled.interpolate(method='linear')

        # Only the inserted months are rounded; observed totals are kept as-is
        gaps = filled.isna()
        interpolated[gaps] = np.round(interpolated[gaps])

        logger.info(f"Filled {int(gaps.sum())} missing months by interpolation")

        return AggregatedSeries.from_pairs(interpolated.items())
