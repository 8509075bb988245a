"""gRPC server exposing the token table.

Each RPC resolves to exactly one ``TokenTable`` operation and runs on a
worker thread from the server's pool. Table errors become operation-scoped
gRPC statuses; only failing to bind is fatal to the process.

Usage:
    # Start on the default port (50051):
    token-manager-server

    # Start on a custom port with the original single-lock behaviour:
    token-manager-server --port 50052 --lock-mode global

    # Listen on a Unix domain socket:
    token-manager-server --address unix:///tmp/token_manager.sock
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from concurrent import futures
from typing import TYPE_CHECKING, Any

import grpc

from token_manager.config import TokenManagerConfig, resolve_config
from token_manager.exceptions import (
    OperationAbortedError,
    TokenAlreadyExistsError,
    TokenManagerError,
    TokenNotFoundError,
)
from token_manager.observers.logger import TokenDumpLogger
from token_manager.proto.token_manager_pb2 import (
    CreateTokenResponse,
    DropTokenResponse,
    ReadTokenResponse,
    WriteTokenResponse,
)
from token_manager.proto.token_manager_pb2_grpc import (
    TokenManagerServicer,
    add_TokenManagerServicer_to_server,
)
from token_manager.table.locking import LockStrategyRegistry
from token_manager.table.table import TokenTable

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("token_manager")

_STATUS_BY_ERROR: tuple[tuple[type[TokenManagerError], grpc.StatusCode], ...] = (
    (TokenNotFoundError, grpc.StatusCode.NOT_FOUND),
    (TokenAlreadyExistsError, grpc.StatusCode.ALREADY_EXISTS),
    (OperationAbortedError, grpc.StatusCode.CANCELLED),
)


def _status_for(exc: TokenManagerError) -> grpc.StatusCode:
    for error_cls, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return code
    return grpc.StatusCode.INTERNAL


def _abort_check(context: Any) -> Callable[[], bool]:
    """Return a callable that is true once the RPC is no longer active."""
    return lambda: not context.is_active()


class TokenManagerService(TokenManagerServicer):
    """Maps the four TokenManager RPCs onto a ``TokenTable``.

    Args:
        table: The table every request operates on.
    """

    def __init__(self, table: TokenTable) -> None:
        self._table = table

    def CreateToken(self, request, context):  # noqa: N802
        try:
            success = self._table.create(request.id)
        except TokenManagerError as exc:
            self._fail(context, "create", exc)
            return CreateTokenResponse()
        return CreateTokenResponse(success=success)

    def WriteToken(self, request, context):  # noqa: N802
        try:
            partial = self._table.write(
                request.id,
                request.name,
                request.low,
                request.mid,
                request.high,
                should_abort=_abort_check(context),
            )
        except TokenManagerError as exc:
            self._fail(context, "write", exc)
            return WriteTokenResponse()
        return WriteTokenResponse(partial=partial)

    def ReadToken(self, request, context):  # noqa: N802
        try:
            final = self._table.read(request.id, should_abort=_abort_check(context))
        except TokenManagerError as exc:
            self._fail(context, "read", exc)
            return ReadTokenResponse()
        return ReadTokenResponse(final=final)

    def DropToken(self, request, context):  # noqa: N802
        try:
            success = self._table.drop(request.id)
        except TokenManagerError as exc:
            self._fail(context, "drop", exc)
            return DropTokenResponse()
        return DropTokenResponse(success=success)

    @staticmethod
    def _fail(context: Any, operation: str, exc: TokenManagerError) -> None:
        """Set the gRPC status matching *exc* on the call."""
        code = _status_for(exc)
        logger.info("%s failed: %s (%s)", operation, exc, code.name)
        context.set_code(code)
        context.set_details(str(exc))


def build_table(config: TokenManagerConfig) -> TokenTable:
    """Construct the table with the configured lock strategy and dump logger.

    Raises:
        ConfigValidationError: If ``config.lock_mode`` is unknown.
    """
    return TokenTable(
        lock_strategy=LockStrategyRegistry.build(config),
        observers=[TokenDumpLogger(config)],
    )


def create_server(
    config: TokenManagerConfig,
    table: TokenTable | None = None,
) -> tuple[grpc.Server, int]:
    """Build and bind (but do not start) a gRPC server.

    Args:
        config: Server configuration (bind address, worker count).
        table: Table to serve. Built from *config* if omitted.

    Returns:
        Tuple of (server, bound port). The port is 0 for Unix sockets.

    Raises:
        TokenManagerError: If the address cannot be bound.
    """
    if table is None:
        table = build_table(config)
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=config.max_workers))
    add_TokenManagerServicer_to_server(TokenManagerService(table), server)
    try:
        port = server.add_insecure_port(config.bind_address)
    except RuntimeError as exc:
        raise TokenManagerError(f"Failed to bind {config.bind_address}: {exc}") from exc
    if port == 0 and not config.bind_address.startswith("unix:"):
        raise TokenManagerError(f"Failed to bind {config.bind_address}")
    return server, port


def serve(config: TokenManagerConfig) -> None:
    """Start the gRPC server and block until terminated.

    Args:
        config: Server configuration.
    """
    table = build_table(config)
    server, port = create_server(config, table)
    server.start()
    logger.info("Token manager listening on %s (port %d)", config.bind_address, port)
    logger.info("Lock mode: %s, %d workers", table.lock_mode, config.max_workers)

    # Graceful shutdown on SIGINT (SIGTERM not available on Windows).
    def _shutdown(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        server.stop(grace=config.grace_period_s)

    signal.signal(signal.SIGINT, _shutdown)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _shutdown)
    server.wait_for_termination()


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and start the server."""
    parser = argparse.ArgumentParser(
        description="gRPC token manager server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  %(prog)s                                 # Default: 0.0.0.0:50051
  %(prog)s --port 50052                    # Custom port
  %(prog)s --lock-mode global              # Serialize every operation
  %(prog)s --dump-level full -v            # Dump every token as JSON
""",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on on all interfaces. Ignored if --address is set.",
    )
    parser.add_argument(
        "--address",
        type=str,
        default=None,
        help="Full bind address (e.g. 'localhost:50051' or 'unix:///path').",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Thread pool size.",
    )
    parser.add_argument(
        "--lock-mode",
        choices=LockStrategyRegistry.list_registered(),
        default=None,
        help="Table concurrency control.",
    )
    parser.add_argument(
        "--dump-level",
        choices=("none", "summary", "full"),
        default=None,
        help="Token dump verbosity after each mutation.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    bind_address = args.address
    if bind_address is None and args.port is not None:
        bind_address = f"0.0.0.0:{args.port}"

    try:
        config = resolve_config(
            TokenManagerConfig(),
            {
                "bind_address": bind_address,
                "max_workers": args.max_workers,
                "lock_mode": args.lock_mode,
                "dump_level": args.dump_level,
            },
        )
        serve(config)
    except TokenManagerError as exc:
        logger.error("Failed to serve: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
