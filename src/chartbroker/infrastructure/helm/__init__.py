"""Helm chart repository and deployer."""
