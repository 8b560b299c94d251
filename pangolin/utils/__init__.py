"""Utility modules for the Pangolin framework."""
