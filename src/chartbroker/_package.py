"""Package metadata."""

PACKAGE_NAME = "chartbroker"
__version__ = "0.3.0"
DOCS_URL = "https://github.com/chartbroker/chartbroker#readme"
