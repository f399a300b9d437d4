"""chartbroker - Open Service Broker backed by Helm charts."""

from chartbroker._package import __version__

__all__ = ["__version__"]
