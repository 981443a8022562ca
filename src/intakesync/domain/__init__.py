"""Domain layer: entities, ports and the sync/reconciliation logic."""
