"""Storage engine integrations."""
