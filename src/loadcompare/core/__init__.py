"""Domain models, ports and pure computations."""
