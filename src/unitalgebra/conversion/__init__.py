"""Conversion factors, table derivation, conversion and unit preferences."""
