"""
Frame Substitution Module
=========================

Applies an IdService to whole DataFrame columns, so a batch of rows can have
its dimension values replaced by surrogate ids before keys are built.
"""

import logging
from typing import Optional

import polars as pl

from .dimension import Dimension
from .id_service import IdService


class FrameIdSubstitutor:
    """
    Adds surrogate id columns to polars DataFrames and restores values from them.
    """

    def __init__(self, id_service: IdService):
        self.id_service = id_service

    @staticmethod
    def _column_values(df: pl.DataFrame, column: str):
        if column not in df.columns:
            raise ValueError(f"Column {column} does not exist")

        dtype = df.schema[column]
        if dtype == pl.Utf8:
            return [None if v is None else v.encode('utf-8') for v in df[column].to_list()]
        if dtype == pl.Binary:
            return df[column].to_list()
        raise ValueError(f"Column {column} has dtype {dtype}, only string and binary columns can be substituted")

    def substitute(self, df: pl.DataFrame, column: str, dimension: Dimension,
                   id_column: Optional[str] = None) -> pl.DataFrame:
        """
        Add a column holding the surrogate id of every value in ``column``.

        Ids are requested in row order, so new values are numbered in the
        order they first appear in the frame. Null values stay null. With a
        MapIdService the batch is all-or-nothing: if the new values do not
        fit, no id is recorded.

        Args:
            df: Input data
            column: String or binary column holding dimension values
            dimension: Dimension the values belong to
            id_column: Name of the new column, defaults to '<column>_id'

        Returns:
            DataFrame with the id column added
        """
        self.id_service.validate_dimension(dimension)
        values = self._column_values(df, column)
        id_column = id_column or f"{column}_id"

        # One batch of distinct values, in first-seen order
        distinct = list(dict.fromkeys(value for value in values if value is not None))
        resolved = dict(zip(distinct, self.id_service.get_ids(dimension, distinct)))
        ids = [None if value is None else resolved[value] for value in values]

        logging.debug(f"Substituted {len(resolved)} distinct values of {column} for dimension {dimension.name}")
        return df.with_columns(pl.Series(id_column, ids, dtype=pl.Binary))

    def restore(self, df: pl.DataFrame, id_column: str, dimension: Dimension,
                value_column: Optional[str] = None) -> pl.DataFrame:
        """
        Add a column with the original values for an id column.

        Args:
            df: Data holding surrogate ids
            id_column: Binary column of ids returned by the id service
            dimension: Dimension the ids belong to
            value_column: Name of the new column, defaults to '<id_column>_value'

        Returns:
            DataFrame with the value column added; unknown ids map to null
        """
        id_values = self._column_values(df, id_column)
        value_column = value_column or f"{id_column}_value"

        restored = [None if id_bytes is None else self.id_service.get_value(dimension, id_bytes)
                    for id_bytes in id_values]
        return df.with_columns(pl.Series(value_column, restored, dtype=pl.Binary))
