"""Kubernetes integration."""
