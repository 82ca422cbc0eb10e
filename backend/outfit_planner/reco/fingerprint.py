"""
Outfit fingerprints: canonical keys for item-id sets.

Two outfits are the same outfit when their fingerprints are equal, regardless of
item order or repeated ids. Fingerprints are derived on read and never stored.
"""
from typing import Dict, Iterable, List, Optional

from ..schemas import OutfitRecord

SEPARATOR = "|"


def canonicalize(item_ids: Iterable) -> str:
    """Deduplicate, sort and join item ids into a fingerprint."""
    return SEPARATOR.join(sorted({str(i) for i in item_ids if i is not None and str(i) != ""}))


class OutfitIndex:
    """Fingerprint lookup over one snapshot of outfit records.

    The snapshot is read once per planning request. Records the request itself
    persists are added with :meth:`add` so later days reuse them.
    """

    def __init__(self, records: Iterable[OutfitRecord]):
        self._by_fingerprint: Dict[str, str] = {}
        self._by_id: Dict[str, OutfitRecord] = {}
        for record in records:
            self.add(record)

    def add(self, record: OutfitRecord) -> None:
        self._by_id[record.id] = record
        # First record wins if the store already holds fingerprint duplicates
        self._by_fingerprint.setdefault(canonicalize(record.item_ids), record.id)

    def find(self, fingerprint: str) -> Optional[OutfitRecord]:
        outfit_id = self._by_fingerprint.get(fingerprint)
        return self._by_id.get(outfit_id) if outfit_id else None

    def get(self, outfit_id: str) -> Optional[OutfitRecord]:
        return self._by_id.get(outfit_id)

    def fingerprint_of(self, outfit_id: str) -> Optional[str]:
        record = self._by_id.get(outfit_id)
        return canonicalize(record.item_ids) if record else None

    @property
    def records(self) -> List[OutfitRecord]:
        return list(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)
