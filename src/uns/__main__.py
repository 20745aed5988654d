"""CLI entry point for the UNS resolver.

Resolves addresses, runs the resolver and HTTP API as long-lived services,
and manages networks in a local static registry file signed with the key
in ``UNS_PRIVATE_KEY``.

Examples:
    ```bash
    python -m uns resolve "utopia.alice//.blog?x=1#top"
    python -m uns resolve utopia.dillanet//.git --extra
    python -m uns serve --log-level DEBUG
    python -m uns register mynet https://mynet.example/uns
    python -m uns subdomain add mynet .wiki https://wiki.mynet.example
    python -m uns networks
    ```
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Any

from uns.core import start_metrics_server
from uns.core.logger import Logger, StructuredFormatter
from uns.core.yaml import load_yaml
from uns.exceptions import RegistryError, UnsError
from uns.models.address import is_valid_network_name
from uns.models.constants import ADDRESS_PREFIX, ADDRESS_SEPARATOR
from uns.models.record import NetworkRecord
from uns.registries import StaticRegistry
from uns.services.api import Api
from uns.services.resolver import Resolver
from uns.utils.keys import ENV_PRIVATE_KEY, KeysConfig, sign_record


CONFIG_BASE = Path("config")
RESOLVER_CONFIG = CONFIG_BASE / "services" / "resolver.yaml"
API_CONFIG = CONFIG_BASE / "services" / "api.yaml"
REGISTRY_FILE = CONFIG_BASE / "registries" / "static.yaml"

logger = Logger("cli")


def setup_logging(level: str) -> None:
    """Configure the root logger with structured formatting.

    Installs a ``StructuredFormatter`` on the root handler so that output
    from both ``Logger`` and the plain ``logging.getLogger()`` calls in the
    registries and utils layers is unified as
    ``level name message key=value ...``.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def _load_yaml_dict(path: Path) -> dict[str, Any]:
    """Load a YAML file as a dict, returning ``{}`` if the file does not exist."""
    if not path.exists():
        logger.warning("config_not_found", path=str(path))
        return {}
    return load_yaml(path)


def _build_resolver(config_path: Path) -> Resolver:
    config = _load_yaml_dict(config_path)
    return Resolver.from_dict(config) if config else Resolver()


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


async def resolve_address(resolver: Resolver, address: str, *, extra: bool) -> int:
    """Resolve one address and print the URL (or JSON with *extra*).

    Returns:
        Exit code: 0 on success, 1 on a UNS error.
    """
    try:
        async with resolver:
            resolution = await resolver.resolve_with_metadata(address, include_extra=extra)
    except UnsError as e:
        logger.error("resolve_failed", address=address, error=e.kind, reason=e.message)
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 1

    if extra:
        print(json.dumps(resolution.to_dict(), indent=2))
    else:
        print(resolution.url)
    return 0


async def serve(resolver: Resolver, api: Api, *, once: bool) -> int:
    """Run the resolver sweep and the HTTP API until a shutdown signal.

    In one-shot mode, a single resolver cycle runs and no server starts.

    Returns:
        Exit code: 0 for success, 1 for failure.
    """
    if once:
        try:
            async with resolver:
                await resolver.run()
            logger.info("resolver_completed")
            return 0
        except Exception as e:  # Intentionally broad: CLI error boundary for one-shot mode
            logger.error("resolver_failed", error=str(e))
            return 1

    metrics_config = resolver.config.metrics
    metrics_server = await start_metrics_server(metrics_config)

    if metrics_config.enabled:
        logger.info(
            "metrics_server_started",
            host=metrics_config.host,
            port=metrics_config.port,
            path=metrics_config.path,
        )

    # Signal handling for graceful shutdown
    def handle_signal(sig: signal.Signals) -> None:
        logger.info("shutdown_signal", signal=sig.name)
        resolver.request_shutdown()
        api.request_shutdown()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_signal, sig)

    try:
        async with resolver, api:
            await asyncio.gather(resolver.run_forever(), api.run_forever())
        return 0
    except Exception as e:  # Intentionally broad: CLI error boundary for continuous mode
        logger.error("serve_failed", error=str(e))
        return 1
    finally:
        await metrics_server.stop()
        if metrics_config.enabled:
            logger.info("metrics_server_stopped")


# ---------------------------------------------------------------------------
# Registry management
# ---------------------------------------------------------------------------


def _load_registry(path: Path) -> StaticRegistry:
    if not path.exists():
        return StaticRegistry()
    return StaticRegistry.from_yaml(path)


async def register_network(registry_path: Path, network: str, resolver_url: str) -> int:
    """Register *network* owned by the configured key and save the registry."""
    if not is_valid_network_name(network):
        logger.error("register_failed", network=network, error="invalid network name")
        return 1

    keys = KeysConfig().keys
    record = NetworkRecord(
        network=network,
        owner=keys.public_key().to_hex(),
        resolvers=(resolver_url,),
        timestamp=int(time.time()),
    )

    registry = _load_registry(registry_path)
    try:
        await registry.register(sign_record(record, keys))
    except RegistryError as e:
        logger.error("register_failed", network=network, error=e.message)
        return 1

    registry.save_yaml(registry_path)
    print(f"Network {network} registered")
    print(f"Owner: {record.owner}")
    print(f"Resolver: {resolver_url}")
    return 0


async def edit_subdomain(
    registry_path: Path,
    network: str,
    token: str,
    target: str | None,
) -> int:
    """Add (``target`` set) or remove (``target`` None) a subdomain and save."""
    if not token.startswith("."):
        logger.error("subdomain_invalid", subdomain=token, error="must start with a dot")
        return 1

    keys = KeysConfig().keys
    registry = _load_registry(registry_path)
    current = await registry.lookup(network)
    if current is None:
        logger.error("network_not_found", network=network)
        return 1

    try:
        edited = (
            current.with_subdomain(token, target)
            if target is not None
            else current.without_subdomain(token)
        )
    except KeyError:
        logger.error("subdomain_not_found", network=network, subdomain=token)
        return 1

    try:
        await registry.update(sign_record(edited, keys))
    except RegistryError as e:
        logger.error("subdomain_update_failed", network=network, error=e.message)
        return 1

    registry.save_yaml(registry_path)
    if target is not None:
        print(f"Subdomain {token} added to network {network}")
        print(f"Address: {ADDRESS_PREFIX}.{network}{ADDRESS_SEPARATOR}{token}")
    else:
        print(f"Subdomain {token} removed from network {network}")
    return 0


def list_subdomains(registry_path: Path, network: str) -> int:
    record = next(
        (r for r in _load_registry(registry_path).list_networks() if r.network == network),
        None,
    )
    if record is None:
        logger.error("network_not_found", network=network)
        return 1
    for token, target in sorted(record.subdomains.items()):
        print(f"{ADDRESS_PREFIX}.{network}{ADDRESS_SEPARATOR}{token} -> {target}")
    return 0


def list_networks(registry_path: Path, owner: str | None) -> int:
    for record in _load_registry(registry_path).list_networks(owner):
        resolvers = ", ".join(record.resolvers) or "-"
        print(f"{record.network}  resolvers={resolvers}  subdomains={len(record.subdomains)}")
    return 0


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="uns",
        description="Utopia Naming System resolver",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    resolve = commands.add_parser("resolve", help="Resolve an address and print the URL")
    resolve.add_argument("address", help="utopia.<network>//<path>")
    resolve.add_argument("--extra", action="store_true", help="Print JSON with metadata")
    resolve.add_argument(
        "--config",
        type=Path,
        default=RESOLVER_CONFIG,
        help=f"Resolver config path (default: {RESOLVER_CONFIG})",
    )

    serve_cmd = commands.add_parser("serve", help="Run the resolver and HTTP API")
    serve_cmd.add_argument(
        "--config",
        type=Path,
        default=RESOLVER_CONFIG,
        help=f"Resolver config path (default: {RESOLVER_CONFIG})",
    )
    serve_cmd.add_argument(
        "--api-config",
        type=Path,
        default=API_CONFIG,
        help=f"API config path (default: {API_CONFIG})",
    )
    serve_cmd.add_argument(
        "--once",
        action="store_true",
        help="Run one cache sweep and exit",
    )

    registry_help = f"Static registry file (default: {REGISTRY_FILE})"

    register = commands.add_parser(
        "register", help=f"Register a network owned by ${ENV_PRIVATE_KEY}"
    )
    register.add_argument("network")
    register.add_argument("resolver", help="Resolver endpoint URI")
    register.add_argument("--registry", type=Path, default=REGISTRY_FILE, help=registry_help)

    networks = commands.add_parser("networks", help="List registered networks")
    networks.add_argument("--owner", help="Only networks of this owner public key")
    networks.add_argument("--registry", type=Path, default=REGISTRY_FILE, help=registry_help)

    subdomain = commands.add_parser("subdomain", help="Manage a network's subdomains")
    actions = subdomain.add_subparsers(dest="action", required=True)
    add = actions.add_parser("add")
    add.add_argument("network")
    add.add_argument("subdomain", help="Dot-prefixed token, e.g. .wiki")
    add.add_argument("target", help="Base URL the subdomain maps to")
    remove = actions.add_parser("remove")
    remove.add_argument("network")
    remove.add_argument("subdomain")
    list_cmd = actions.add_parser("list")
    list_cmd.add_argument("network")
    for action in (add, remove, list_cmd):
        action.add_argument("--registry", type=Path, default=REGISTRY_FILE, help=registry_help)

    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Main entry point: parse args and dispatch the command."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.command == "resolve":
            return await resolve_address(
                _build_resolver(args.config), args.address, extra=args.extra
            )

        if args.command == "serve":
            resolver = _build_resolver(args.config)
            api_dict = _load_yaml_dict(args.api_config)
            api = Api.from_dict(api_dict, resolver=resolver) if api_dict else Api(resolver)
            return await serve(resolver, api, once=args.once)

        if args.command == "register":
            return await register_network(args.registry, args.network, args.resolver)

        if args.command == "networks":
            return list_networks(args.registry, args.owner)

        if args.action == "list":
            return list_subdomains(args.registry, args.network)
        target = args.target if args.action == "add" else None
        return await edit_subdomain(args.registry, args.network, args.subdomain, target)

    except (UnsError, ValueError) as e:
        # ValueError covers pydantic validation and a missing private key
        logger.error("command_failed", command=args.command, error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
