"""Random sale/refill traffic for demos."""
