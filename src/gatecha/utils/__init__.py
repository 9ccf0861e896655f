"""Client helpers for GateCHA challenges."""
