"""Domain services: period queries and the persisted event store."""
