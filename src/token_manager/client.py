"""gRPC client and command-line tool for the token manager.

Usage:
    token-manager --create --id t1
    token-manager --write --id t1 --name alice --low 0 --mid 3 --high 6
    token-manager --read --id t1
    token-manager --drop --id t1 --host 10.0.0.5 --port 50052
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING, Any

import grpc

from token_manager.config import TokenManagerConfig
from token_manager.exceptions import (
    OperationAbortedError,
    TokenAlreadyExistsError,
    TokenManagerError,
    TokenNotFoundError,
)
from token_manager.proto.token_manager_pb2 import (
    UINT64_MAX,
    CreateTokenRequest,
    DropTokenRequest,
    ReadTokenRequest,
    WriteTokenRequest,
)
from token_manager.proto.token_manager_pb2_grpc import TokenManagerStub

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger("token_manager")


class TokenManagerClient:
    """Blocking client for the TokenManager service.

    gRPC status codes are translated back into the table's exceptions, so
    callers handle the same errors locally and remotely.

    Args:
        address: Server address (``host:port`` or ``unix:///path``).
        timeout_s: Deadline applied to every RPC.
    """

    def __init__(self, address: str, timeout_s: float = 5.0) -> None:
        self._address = address
        self._timeout_s = timeout_s
        self._channel = grpc.insecure_channel(address)
        self._stub = TokenManagerStub(self._channel)

    @classmethod
    def from_config(cls, config: TokenManagerConfig) -> TokenManagerClient:
        """Build a client for ``config.server_address``."""
        return cls(config.server_address, timeout_s=config.grpc_timeout_ms / 1000.0)

    def create(self, token_id: str) -> bool:
        """Create a token. Raises ``TokenAlreadyExistsError`` if present."""
        response = self._call("create", token_id, self._stub.CreateToken, CreateTokenRequest(id=token_id))
        return response.success

    def write(self, token_id: str, name: str, low: int, mid: int, high: int) -> int:
        """Write name and domain; returns the observation-phase ``partial``."""
        request = WriteTokenRequest(id=token_id, name=name, low=low, mid=mid, high=high)
        response = self._call("write", token_id, self._stub.WriteToken, request)
        return response.partial

    def read(self, token_id: str) -> int:
        """Run the decision phase; returns ``final``."""
        response = self._call("read", token_id, self._stub.ReadToken, ReadTokenRequest(id=token_id))
        return response.final

    def drop(self, token_id: str) -> bool:
        """Remove a token. Raises ``TokenNotFoundError`` if absent."""
        response = self._call("drop", token_id, self._stub.DropToken, DropTokenRequest(id=token_id))
        return response.success

    def _call(self, operation: str, token_id: str, method: Any, request: Any) -> Any:
        try:
            return method(request, timeout=self._timeout_s)
        except grpc.RpcError as exc:
            code = exc.code()
            if code == grpc.StatusCode.NOT_FOUND:
                raise TokenNotFoundError(token_id, operation) from exc
            if code == grpc.StatusCode.ALREADY_EXISTS:
                raise TokenAlreadyExistsError(token_id, operation) from exc
            if code == grpc.StatusCode.CANCELLED:
                raise OperationAbortedError(f"{operation} of {token_id!r} was cancelled") from exc
            raise TokenManagerError(
                f"{operation} of {token_id!r} failed against {self._address}: "
                f"{code.name}: {exc.details()}"
            ) from exc

    def close(self) -> None:
        """Close the underlying channel."""
        self._channel.close()

    def __enter__(self) -> TokenManagerClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _uint64(text: str) -> int:
    """argparse type accepting only unsigned 64-bit integers."""
    try:
        value = int(text, 10)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid uint64 value: {text!r}") from exc
    if value < 0 or value > UINT64_MAX:
        raise argparse.ArgumentTypeError(f"value out of uint64 range: {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(description="Token manager command-line client")
    parser.add_argument("--host", default="localhost", help="The server address")
    parser.add_argument("--port", type=int, default=50051, help="The server port")

    ops = parser.add_mutually_exclusive_group()
    ops.add_argument("--create", action="store_true", help="Create a new token")
    ops.add_argument("--write", action="store_true", help="Write to a token")
    ops.add_argument("--read", action="store_true", help="Read from a token")
    ops.add_argument("--drop", action="store_true", help="Drop a token")

    parser.add_argument("--id", default="", help="The ID of the token to operate on")
    parser.add_argument("--name", default="", help="The name of the token")
    parser.add_argument("--low", type=_uint64, default=0, help="The lower bound of the token's domain")
    parser.add_argument("--mid", type=_uint64, default=0, help="The midpoint of the token's domain")
    parser.add_argument("--high", type=_uint64, default=0, help="The upper bound of the token's domain")
    parser.add_argument(
        "--timeout-ms",
        type=float,
        default=None,
        help="Per-RPC deadline in milliseconds (default: TM_GRPC_TIMEOUT_MS or 5000).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run one operation against the server and print its result."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    if not (args.create or args.write or args.read or args.drop):
        logger.error("Please specify a valid operation (--create, --write, --read, --drop)")
        sys.exit(2)

    timeout_ms = args.timeout_ms
    if timeout_ms is None:
        timeout_ms = TokenManagerConfig().grpc_timeout_ms

    with TokenManagerClient(f"{args.host}:{args.port}", timeout_s=timeout_ms / 1000.0) as client:
        try:
            if args.create:
                print(client.create(args.id))
            elif args.write:
                partial = client.write(args.id, args.name, args.low, args.mid, args.high)
                print(f"Partial value: {partial}")
            elif args.read:
                print(f"Final value: {client.read(args.id)}")
            else:
                print(client.drop(args.id))
        except TokenManagerError as exc:
            logger.error("Failed: %s", exc)
            sys.exit(1)


if __name__ == "__main__":
    main()
