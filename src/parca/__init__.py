"""parca: versioned prompt, instruction and skill assets from Git registries.

Import from submodules:
- core.resolver: AssetResolver (install, resolve_all, update)
- core.publisher: CheckpointingPublisher
- core.context: ParcaContext, create_context
"""

__version__ = "0.1.0"
