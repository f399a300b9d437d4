"""Cluster resource model."""
