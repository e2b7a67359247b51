"""Ordered accumulation of feature records."""

from collections.abc import Iterable, Iterator

from .models import FeatureRecord


class DatasetBuilder:
    """
    Collects feature records in append order.

    Records are neither deduplicated nor sorted. The column order of the
    dataset is the key order of the first record.
    """

    def __init__(self, records: Iterable[FeatureRecord] = ()) -> None:
        self._records: list[FeatureRecord] = list(records)

    def append(self, record: FeatureRecord) -> None:
        """Add one record at the end of the dataset."""
        self._records.append(record)

    def extend(self, records: Iterable[FeatureRecord]) -> None:
        for record in records:
            self.append(record)

    @property
    def records(self) -> list[FeatureRecord]:
        """The accumulated records, in append order."""
        return self._records

    @property
    def columns(self) -> list[str]:
        """Column names, taken from the first record (empty if none)."""
        if not self._records:
            return []
        return list(self._records[0].keys())

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FeatureRecord]:
        return iter(self._records)
