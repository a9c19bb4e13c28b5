"""
Map Id Service Module
=====================

In-memory implementation of IdService. Every dimension gets its own value to
id dictionary and its own next-id counter, both created on first use. Ids are
handed out in first-seen order starting at 0, encoded big-endian and cut down
to the dimension's field width.

Nothing is persisted: ids are stable for the lifetime of one MapIdService
instance only. This makes it suitable for tests and single-process pipelines.
"""

import logging
import threading
from contextlib import nullcontext
from typing import Dict, Iterable, List, Optional

import polars as pl

import config
from .byte_utils import MAX_ID, bytes_to_long_pad, fits_in_width, to_hex, truncate_id
from .dimension import Dimension
from .errors import FieldWidthExceeded, IDSpaceExhausted
from .id_service import IdService


class _DimensionTable:
    """
    All state of one dimension. Only touched while holding its own lock.
    """

    __slots__ = ('id_map', 'reverse_map', 'next_id', 'lock')

    def __init__(self, lock):
        self.id_map: Dict[bytes, int] = {}
        self.reverse_map: Dict[int, bytes] = {}
        self.next_id = 0
        self.lock = lock

    def record(self, value: bytes) -> int:
        id_val = self.next_id
        self.id_map[value] = id_val
        self.reverse_map[id_val] = value
        self.next_id = id_val + 1
        return id_val


class MapIdService(IdService):
    """
    Dictionary table assigning monotonically increasing ids per dimension.
    """

    def __init__(self, thread_safe: Optional[bool] = None, allow_truncation: Optional[bool] = None):
        """
        Args:
            thread_safe: Guard id assignment with a lock per dimension
                (defaults to config.ID_SERVICE_THREAD_SAFE)
            allow_truncation: Hand out ids wider than the field width by
                dropping their high bytes instead of failing
                (defaults to config.ID_SERVICE_ALLOW_TRUNCATION)
        """
        if thread_safe is None:
            thread_safe = config.ID_SERVICE_THREAD_SAFE
        if allow_truncation is None:
            allow_truncation = config.ID_SERVICE_ALLOW_TRUNCATION

        self.thread_safe = thread_safe
        self.allow_truncation = allow_truncation

        self._tables: Dict[Dimension, _DimensionTable] = {}
        self._registry_lock = self._new_lock()

    def _new_lock(self):
        return threading.Lock() if self.thread_safe else nullcontext()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _table_for(self, dimension: Dimension) -> _DimensionTable:
        """
        Get the table for a dimension, creating it on first request.
        """
        table = self._tables.get(dimension)
        if table is not None:
            return table

        with self._registry_lock:
            table = self._tables.get(dimension)
            if table is None:
                logging.debug(f"Creating new id map for dimension {dimension}")
                table = _DimensionTable(self._new_lock())
                self._tables[dimension] = table
            return table

    @staticmethod
    def _as_bytes(value) -> bytes:
        if isinstance(value, bytes):
            return value
        if isinstance(value, (bytearray, memoryview)):
            return bytes(value)
        raise TypeError(f"Dimension values must be bytes-like, got {type(value).__name__}")

    def _check_capacity(self, dimension: Dimension, last_id: int):
        """
        Make sure ids up to ``last_id`` can be handed out. Runs before anything is recorded.
        """
        if last_id + 1 > MAX_ID:
            raise IDSpaceExhausted(f"All unique IDs have been assigned for dimension {dimension}")

        if not fits_in_width(last_id, dimension.num_field_bytes):
            if not self.allow_truncation:
                raise FieldWidthExceeded(
                    f"ID {last_id} does not fit in {dimension.num_field_bytes} bytes "
                    f"for dimension {dimension}"
                )
            logging.warning(f"Truncating ID {last_id} to {dimension.num_field_bytes} bytes for "
                            f"dimension {dimension}, surrogate ids will collide")

    def _encode(self, dimension: Dimension, id_val: int, value: bytes) -> bytes:
        num_field_bytes = dimension.num_field_bytes
        id_bytes = truncate_id(id_val, num_field_bytes)
        assert len(id_bytes) == num_field_bytes
        assert not fits_in_width(id_val, num_field_bytes) or bytes_to_long_pad(id_bytes) == id_val

        if logging.getLogger().isEnabledFor(logging.DEBUG):
            logging.debug(f"Returning unique ID {to_hex(id_bytes)} for dimension {dimension} "
                          f"input {to_hex(value)}")
        return id_bytes

    def get_id(self, dimension: Dimension, value: bytes) -> bytes:
        """
        Get the surrogate id for a value, assigning the next free id on first sight.

        Args:
            dimension: Dimension with id substitution enabled
            value: Raw value bytes, may be empty

        Returns:
            Id as exactly dimension.num_field_bytes big-endian bytes

        Raises:
            ConfigurationError: dimension is not set up for substitution
            IDSpaceExhausted: the 64-bit counter would wrap around
            FieldWidthExceeded: the new id does not fit the field width
        """
        self.validate_dimension(dimension)
        value = self._as_bytes(value)

        table = self._table_for(dimension)
        with table.lock:
            id_val = table.id_map.get(value)
            if id_val is None:
                self._check_capacity(dimension, table.next_id)
                id_val = table.record(value)

        return self._encode(dimension, id_val, value)

    def get_ids(self, dimension: Dimension, values: Iterable[bytes]) -> List[bytes]:
        """
        Get ids for a batch of values. Either every new value is assigned or none is.

        New values are numbered in the order they first appear in ``values``.

        Args:
            dimension: Dimension with id substitution enabled
            values: Raw value bytes

        Returns:
            Ids in the same order as ``values``
        """
        self.validate_dimension(dimension)
        values = [self._as_bytes(value) for value in values]

        table = self._table_for(dimension)
        with table.lock:
            new_values = list(dict.fromkeys(v for v in values if v not in table.id_map))
            if new_values:
                self._check_capacity(dimension, table.next_id + len(new_values) - 1)
                for value in new_values:
                    table.record(value)
            id_vals = [table.id_map[value] for value in values]

        return [self._encode(dimension, id_val, value) for id_val, value in zip(id_vals, values)]

    def get_value(self, dimension: Dimension, id_bytes: bytes) -> Optional[bytes]:
        """
        Get the original value for an id previously returned by get_id.

        Args:
            dimension: Dimension the id belongs to
            id_bytes: Id bytes as returned by get_id

        Returns:
            Value bytes if the id is known, None otherwise
        """
        self.validate_dimension(dimension)
        id_bytes = self._as_bytes(id_bytes)
        if len(id_bytes) != dimension.num_field_bytes:
            raise ValueError(f"Expected {dimension.num_field_bytes} id bytes for dimension "
                             f"{dimension}, got {len(id_bytes)}")

        table = self._tables.get(dimension)
        if table is None:
            return None
        return table.reverse_map.get(bytes_to_long_pad(id_bytes))

    def has_value(self, dimension: Dimension, value: bytes) -> bool:
        """Check whether a value already has an id, without assigning one."""
        table = self._tables.get(dimension)
        return table is not None and self._as_bytes(value) in table.id_map

    def get_allocated_count(self, dimension: Dimension) -> int:
        table = self._tables.get(dimension)
        return 0 if table is None else len(table.id_map)

    def get_next_id(self, dimension: Dimension) -> int:
        table = self._tables.get(dimension)
        return 0 if table is None else table.next_id

    def dimensions(self) -> List[Dimension]:
        return list(self._tables)

    def snapshot(self, dimension: Dimension) -> pl.DataFrame:
        """
        Export one dimension's dictionary as a DataFrame ordered by id.

        Args:
            dimension: Dimension to export

        Returns:
            DataFrame with columns value (Binary), id (UInt64), id_hex (Utf8)
        """
        table = self._tables.get(dimension)
        if table is None:
            entries = {}
        else:
            with table.lock:
                entries = dict(table.reverse_map)

        ids = sorted(entries)
        return pl.DataFrame(
            {
                'value': [entries[id_val] for id_val in ids],
                'id': ids,
                'id_hex': [to_hex(truncate_id(id_val, dimension.num_field_bytes)) for id_val in ids],
            },
            schema={'value': pl.Binary, 'id': pl.UInt64, 'id_hex': pl.Utf8}
        )

    def close(self):
        """
        Drop every dictionary and counter. Later calls start again from id 0.

        Assignments still running against a dropped table finish on that
        table and never reach the fresh ones.
        """
        with self._registry_lock:
            count = len(self._tables)
            self._tables = {}
        logging.info(f"Id service closed, released {count} dimension dictionaries")
