import threading
from typing import Iterable

from ccstat.ids import UniqueHash
from ccstat.models import UsageRecord


class DeduplicationStore:
    """
    DeduplicationStore: Is a thread-safe store for tracking the
    usage records already seen during one load.

    Prevents double-counting records that were re-delivered into
    several log files (or several data directories) by keeping a
    set of their unique hashes. One store is shared by every loader
    worker; the first copy of a hash to reach the store wins.
    """

    def __init__(self) -> "None":
        self._lock: "threading.Lock" = threading.Lock()
        self._seen: "set[UniqueHash]" = set()

    def __len__(self) -> "int":
        with self._lock:
            return len(self._seen)

    def filter_new(self, records: "Iterable[UsageRecord]") -> "list[UsageRecord]":
        """
        returns the records of one batch that were not seen before,
        marking their hashes. Records without a hash are always kept.
        The whole batch is checked under a single lock acquisition.
        """
        kept: "list[UsageRecord]" = []
        with self._lock:
            for record in records:
                unique_hash = record.unique_hash
                if unique_hash is not None:
                    if unique_hash in self._seen:
                        continue
                    self._seen.add(unique_hash)

                kept.append(record)

        return kept
