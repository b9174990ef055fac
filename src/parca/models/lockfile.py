"""Lockfile models (.parca-assets.lock)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LockedAsset:
    """The exact commit and content hash an asset version was resolved against."""

    id: str
    version: str
    source: str
    commit: str
    sha256: str
    manifest_hash: str
    resolved_at: str


@dataclass(frozen=True)
class Lockfile:
    """Set of locked assets keyed by (id, source).

    Mutators return a new Lockfile; at most one record exists per key.
    """

    assets: tuple[LockedAsset, ...] = ()

    def find(self, asset_id: str, source: str) -> LockedAsset | None:
        for locked in self.assets:
            if locked.id == asset_id and locked.source == source:
                return locked
        return None

    def upsert(self, entry: LockedAsset) -> "Lockfile":
        """Return new lockfile with entry replacing any record for the same key."""
        kept = tuple(a for a in self.assets if not (a.id == entry.id and a.source == entry.source))
        return Lockfile(assets=(*kept, entry))

    def remove(self, asset_id: str, source: str) -> "Lockfile":
        kept = tuple(a for a in self.assets if not (a.id == asset_id and a.source == source))
        return Lockfile(assets=kept)
