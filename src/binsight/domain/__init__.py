"""Domain layer: model, identity extraction, notification reconciliation, ports."""
