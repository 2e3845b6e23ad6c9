"""Client protocols for the storage and administration services."""
