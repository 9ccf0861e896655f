"""HTTP layer of the GateCHA gateway."""
