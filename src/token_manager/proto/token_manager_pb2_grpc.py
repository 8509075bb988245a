"""Hand-written gRPC stubs for the token manager service.

Provides ``TokenManagerStub`` for clients, ``TokenManagerServicer`` as the
server base class, and ``add_TokenManagerServicer_to_server`` to register
an implementation. All four RPCs are unary.

If the proto definition changes, update these stubs or regenerate with
``grpc_tools.protoc``.
"""

from __future__ import annotations

from typing import Any

from token_manager.proto import token_manager_pb2 as pb2

SERVICE_NAME = "token_manage.TokenManager"

# method name -> (request class, response class)
_METHODS: dict[str, tuple[Any, Any]] = {
    "CreateToken": (pb2.CreateTokenRequest, pb2.CreateTokenResponse),
    "WriteToken": (pb2.WriteTokenRequest, pb2.WriteTokenResponse),
    "ReadToken": (pb2.ReadTokenRequest, pb2.ReadTokenResponse),
    "DropToken": (pb2.DropTokenRequest, pb2.DropTokenResponse),
}


class TokenManagerStub:
    """gRPC client stub for the TokenManager service.

    Args:
        channel: A gRPC Channel instance.
    """

    def __init__(self, channel: Any) -> None:
        for method, (request_cls, response_cls) in _METHODS.items():
            setattr(
                self,
                method,
                channel.unary_unary(
                    f"/{SERVICE_NAME}/{method}",
                    request_serializer=request_cls.SerializeToString,
                    response_deserializer=response_cls.FromString,
                ),
            )


class TokenManagerServicer:
    """Base class for TokenManager server implementations.

    Override the methods in this class to implement the service.
    """

    def CreateToken(self, request: Any, context: Any) -> Any:  # noqa: N802
        """Create a token with the requested id."""
        return _unimplemented(context)

    def WriteToken(self, request: Any, context: Any) -> Any:  # noqa: N802
        """Set name and domain and run the observation phase."""
        return _unimplemented(context)

    def ReadToken(self, request: Any, context: Any) -> Any:  # noqa: N802
        """Run the decision phase."""
        return _unimplemented(context)

    def DropToken(self, request: Any, context: Any) -> Any:  # noqa: N802
        """Remove a token."""
        return _unimplemented(context)


def _unimplemented(context: Any) -> Any:
    import grpc

    context.set_code(grpc.StatusCode.UNIMPLEMENTED)
    context.set_details("Method not implemented!")
    raise NotImplementedError("Method not implemented!")


def add_TokenManagerServicer_to_server(  # noqa: N802
    servicer: TokenManagerServicer,
    server: Any,
) -> None:
    """Register a ``TokenManagerServicer`` with a gRPC server.

    Args:
        servicer: The service implementation.
        server: A ``grpc.Server`` instance.
    """
    from grpc import method_handlers_generic_handler, unary_unary_rpc_method_handler

    rpc_method_handlers = {
        method: unary_unary_rpc_method_handler(
            getattr(servicer, method),
            request_deserializer=request_cls.FromString,
            response_serializer=response_cls.SerializeToString,
        )
        for method, (request_cls, response_cls) in _METHODS.items()
    }
    generic_handler = method_handlers_generic_handler(SERVICE_NAME, rpc_method_handlers)
    server.add_generic_rpc_handlers((generic_handler,))
