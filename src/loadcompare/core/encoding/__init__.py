"""Encoders for result snapshots, CSV files and terminal tables."""
