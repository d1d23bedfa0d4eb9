"""HTTP adapters serving the live results stream."""
