"""chartbroker command line."""

import argparse
import sys
from typing import Any, Optional

from chartbroker._package import PACKAGE_NAME, __version__
from chartbroker.cli.console import catalog_table, print_error, print_json, print_success, print_table
from chartbroker.config.manager import ConfigurationManager
from chartbroker.domain.base.exceptions import DomainException


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PACKAGE_NAME, description="Open Service Broker for Helm charts")
    parser.add_argument("--config", help="Path to config.json")
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the broker HTTP server")
    serve.add_argument("--port", type=int, help="Port to listen on")
    serve.add_argument("--tls-cert", help="TLS certificate file")
    serve.add_argument("--tls-key", help="TLS private key file")
    serve.add_argument("--helm-url", help="Chart repository URL")
    serve.add_argument("--helm-binary", help="Path to the helm executable")
    serve.add_argument("--default-namespace", help="Namespace used when a request carries none")
    serve.add_argument("--provisioning-settings", help="YAML file with per-service override parameters")
    serve.add_argument("--cluster-domain", help="Cluster DNS domain used in service hosts")
    serve.add_argument(
        "--service-catalog-enabled-only",
        action="store_true",
        default=None,
        help="Only list charts that have a credential provider",
    )
    serve.add_argument("--storage", choices=["json", "configmap"], help="Operation record backend")
    serve.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    serve.add_argument("--log-format", choices=["text", "json"])

    catalog = subparsers.add_parser("catalog", help="Print the service catalog")
    catalog.add_argument("--helm-url", help="Chart repository URL")
    catalog.add_argument("--service-catalog-enabled-only", action="store_true", default=None)
    catalog.add_argument("--json", action="store_true", help="Print the OSB catalog body")

    subparsers.add_parser("version", help="Print version information")
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict[str, dict[str, Any]]:
    """Map command line flags onto configuration sections."""
    get = lambda name: getattr(args, name, None)  # noqa: E731
    return {
        "server": {"port": get("port"), "tls_cert": get("tls_cert"), "tls_key": get("tls_key")},
        "broker": {
            "helm_repo_url": get("helm_url"),
            "helm_binary": get("helm_binary"),
            "default_namespace": get("default_namespace"),
            "provisioning_settings_path": get("provisioning_settings"),
            "cluster_domain": get("cluster_domain"),
            "service_catalog_enabled_only": get("service_catalog_enabled_only"),
        },
        "storage": {"type": get("storage")},
        "logging": {"level": get("log_level"), "format": get("log_format")},
    }


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from chartbroker.api.server import create_fastapi_app
    from chartbroker.bootstrap import build_application
    from chartbroker.infrastructure.logging.logger import setup_logging
    from chartbroker.infrastructure.validation import StartupValidator

    config = StartupValidator(args.config, overrides_from_args(args)).validate_startup()
    setup_logging(config.logging.level, config.logging.format, config.logging.file)

    application = build_application(config)
    app = create_fastapi_app(application.broker, application.metrics)
    scheme = "https" if config.server.tls_enabled else "http"
    print_success(f"{PACKAGE_NAME} {__version__} listening on {scheme}://{config.server.host}:{config.server.port}")
    try:
        uvicorn.run(
            app,
            host=config.server.host,
            port=config.server.port,
            ssl_certfile=config.server.tls_cert,
            ssl_keyfile=config.server.tls_key,
            log_config=None,
        )
    finally:
        application.shutdown(wait=False)
    return 0


def run_catalog(args: argparse.Namespace) -> int:
    from chartbroker.bootstrap import build_catalog_service

    config = ConfigurationManager(args.config, overrides=overrides_from_args(args)).app_config
    catalog = build_catalog_service(config).get_catalog().to_osb()
    if args.json:
        print_json(catalog)
    else:
        print_table(catalog_table(catalog))
    return 0


def run_version(args: argparse.Namespace) -> int:
    print_json({"name": PACKAGE_NAME, "version": __version__, "python": sys.version.split()[0]})
    return 0


COMMANDS = {"serve": run_serve, "catalog": run_catalog, "version": run_version}


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2
    try:
        return COMMANDS[args.command](args)
    except DomainException as e:
        print_error(e.message)
        return 1
