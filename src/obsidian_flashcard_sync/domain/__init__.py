"""Domain layer: interfaces the sync engine depends on."""
