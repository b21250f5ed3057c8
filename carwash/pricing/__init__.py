"""Hierarchical price resolution."""
