"""Data models for parca.

Import from submodules:
- manifest: AssetKind, Manifest, ManifestAsset, ManifestVersion
- config: AssetEntry, ConsumerConfig, SourceConfig
- lockfile: LockedAsset, Lockfile
- resolution: CacheKey, InstallConflict, PublishResult, RemoteAssetInfo, ResolvedAsset
"""
