"""Startup validation for the broker."""

import shutil
import sys
from pathlib import Path
from typing import Any, Optional

from chartbroker._package import DOCS_URL
from chartbroker.cli.console import print_command, print_error, print_info, print_warning
from chartbroker.config.manager import ConfigurationManager
from chartbroker.config.schemas.app_schema import AppConfig
from chartbroker.domain.base.exceptions import ConfigurationError


class StartupValidator:
    """Validates startup requirements with fail-fast behavior."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[dict[str, dict[str, Any]]] = None,
    ) -> None:
        self.config_path = config_path
        self.overrides = overrides or {}
        self.app_config: Optional[AppConfig] = None

    def validate_startup(self) -> AppConfig:
        """Validate and return the configuration. Exits on critical failures."""
        self._validate_critical()
        self._validate_important()
        return self.app_config

    def _validate_critical(self) -> None:
        manager = ConfigurationManager(self.config_path, overrides=self.overrides)
        try:
            self.app_config = manager.app_config
        except ConfigurationError as e:
            print_error(f"Invalid configuration: {e.message}")
            self._print_config_help(manager.config_path)
            sys.exit(1)

        if shutil.which(self.app_config.broker.helm_binary) is None:
            print_error(f"helm binary not found: {self.app_config.broker.helm_binary}")
            print_info("Install helm 3 or point broker.helm_binary at it:")
            print_command("  chartbroker serve --helm-binary /usr/local/bin/helm")
            sys.exit(1)

        server = self.app_config.server
        if server.tls_enabled:
            for label, path in (("certificate", server.tls_cert), ("key", server.tls_key)):
                if not Path(path).is_file():
                    print_error(f"TLS {label} not found: {path}")
                    sys.exit(1)

    def _validate_important(self) -> None:
        settings = self.app_config.broker.provisioning_settings_path
        if settings and not Path(settings).is_file():
            print_warning(f"Provisioning settings file not found: {settings}")
        if not self.app_config.broker.default_namespace:
            print_info("No default namespace set; provision requests must carry context.namespace")

    def _print_config_help(self, config_path: Optional[Path]) -> None:
        print_info("")
        if config_path:
            print_info(f"Configuration file: {config_path}")
        print_info("To fix:")
        print_info("  1. Check the JSON file and its field names")
        print_command("  2. Or pass settings as flags: chartbroker serve --help")
        print_info(f"Documentation: {DOCS_URL}")
