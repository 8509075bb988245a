"""Tests for the gRPC service, end to end over a real in-process server."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock

import grpc
import pytest

from selection_reference import reference_final, reference_partial
from token_manager.client import TokenManagerClient
from token_manager.config import TokenManagerConfig
from token_manager.exceptions import (
    TokenAlreadyExistsError,
    TokenManagerError,
    TokenNotFoundError,
)
from token_manager.proto.token_manager_pb2 import (
    CreateTokenRequest,
    ReadTokenRequest,
    WriteTokenRequest,
)
from token_manager.proto.token_manager_pb2_grpc import TokenManagerStub
from token_manager.server import TokenManagerService, build_table, create_server
from token_manager.table.table import TokenTable


def _config(**overrides: Any) -> TokenManagerConfig:
    defaults: dict[str, Any] = {
        "bind_address": "localhost:0",
        "max_workers": 4,
        "dump_level": "none",
    }
    defaults.update(overrides)
    return TokenManagerConfig(_env_file=None, **defaults)  # type: ignore[arg-type]


@pytest.fixture(params=["global", "per_token"])
def server_table(request: pytest.FixtureRequest) -> Iterator[tuple[str, TokenTable]]:
    """Start a server on an ephemeral port; yield its address and table."""
    config = _config(lock_mode=request.param)
    table = build_table(config)
    server, port = create_server(config, table)
    server.start()
    try:
        yield f"localhost:{port}", table
    finally:
        server.stop(grace=None)


@pytest.fixture
def client(server_table: tuple[str, TokenTable]) -> Iterator[TokenManagerClient]:
    address, _ = server_table
    with TokenManagerClient(address, timeout_s=5.0) as c:
        yield c


class TestEndToEnd:
    """Full lifecycle through client, wire codec, servicer and table."""

    def test_concrete_scenario(self, client: TokenManagerClient) -> None:
        assert client.create("t1") is True
        partial = client.write("t1", "alice", 0, 3, 6)
        assert partial == reference_partial("alice", 0, 3)
        final = client.read("t1")
        assert final == reference_final("alice", 3, 6, partial)
        assert client.drop("t1") is True
        with pytest.raises(TokenNotFoundError):
            client.read("t1")

    def test_create_twice(self, client: TokenManagerClient) -> None:
        client.create("dup")
        with pytest.raises(TokenAlreadyExistsError) as info:
            client.create("dup")
        assert info.value.token_id == "dup"

    @pytest.mark.parametrize("operation", ["write", "read", "drop"])
    def test_unknown_id(self, client: TokenManagerClient, operation: str) -> None:
        args = {"write": ("ghost", "n", 0, 1, 2), "read": ("ghost",), "drop": ("ghost",)}
        with pytest.raises(TokenNotFoundError):
            getattr(client, operation)(*args[operation])

    def test_state_lives_in_server_table(
        self, client: TokenManagerClient, server_table: tuple[str, TokenTable]
    ) -> None:
        _, table = server_table
        client.create("t1")
        partial = client.write("t1", "bob", 5, 15, 25)
        snap = table.get("t1")
        assert snap.name == "bob"
        assert snap.partial == partial

    def test_max_uint64_bounds_survive_the_wire(
        self, client: TokenManagerClient, server_table: tuple[str, TokenTable]
    ) -> None:
        _, table = server_table
        top = 2**64 - 1
        client.create("big")
        partial = client.write("big", "edge", top - 4, top - 2, top)
        assert partial == reference_partial("edge", top - 4, top - 2)
        assert client.read("big") == reference_final("edge", top - 2, top, partial)
        assert table.get("big").high == top

    def test_raw_stub_status_codes(self, server_table: tuple[str, TokenTable]) -> None:
        address, _ = server_table
        with grpc.insecure_channel(address) as channel:
            stub = TokenManagerStub(channel)
            assert stub.CreateToken(CreateTokenRequest(id="raw"), timeout=5).success is True

            with pytest.raises(grpc.RpcError) as info:
                stub.CreateToken(CreateTokenRequest(id="raw"), timeout=5)
            assert info.value.code() == grpc.StatusCode.ALREADY_EXISTS
            assert "raw" in info.value.details()

            with pytest.raises(grpc.RpcError) as info:
                stub.ReadToken(ReadTokenRequest(id="missing"), timeout=5)
            assert info.value.code() == grpc.StatusCode.NOT_FOUND
            assert "missing" in info.value.details()
            assert "read" in info.value.details()

            resp = stub.WriteToken(WriteTokenRequest(id="raw", name="n", low=0, mid=4, high=8), timeout=5)
            assert resp.partial == reference_partial("n", 0, 4)


class TestServicerUnit:
    """Servicer behaviour against a mocked gRPC context."""

    def _context(self, active: bool = True) -> MagicMock:
        context = MagicMock()
        context.is_active.return_value = active
        return context

    def test_not_found_sets_status(self) -> None:
        service = TokenManagerService(TokenTable())
        context = self._context()
        response = service.ReadToken(ReadTokenRequest(id="x"), context)
        context.set_code.assert_called_once_with(grpc.StatusCode.NOT_FOUND)
        assert "'x'" in context.set_details.call_args[0][0]
        assert response.final == 0

    def test_inactive_rpc_cancels_scan(self) -> None:
        table = TokenTable()
        table.create("t")
        service = TokenManagerService(table)
        context = self._context(active=False)
        service.WriteToken(WriteTokenRequest(id="t", name="n", low=0, mid=1000, high=2000), context)
        context.set_code.assert_called_once_with(grpc.StatusCode.CANCELLED)
        assert table.get("t").name == ""

    def test_success_sets_no_status(self) -> None:
        service = TokenManagerService(TokenTable())
        context = self._context()
        assert service.CreateToken(CreateTokenRequest(id="t"), context).success is True
        context.set_code.assert_not_called()


class TestServerConstruction:
    """Tests for build_table and create_server."""

    def test_build_table_uses_lock_mode(self) -> None:
        assert build_table(_config(lock_mode="global")).lock_mode == "global"

    def test_unknown_lock_mode(self) -> None:
        with pytest.raises(TokenManagerError, match="Unknown lock mode"):
            build_table(_config(lock_mode="sharded"))

    def test_ephemeral_port_assigned(self) -> None:
        server, port = create_server(_config())
        try:
            assert port > 0
        finally:
            server.stop(grace=None)

    def test_bind_failure_zero_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = MagicMock()
        fake.add_insecure_port.return_value = 0
        monkeypatch.setattr("token_manager.server.grpc.server", lambda *a, **kw: fake)
        with pytest.raises(TokenManagerError, match="Failed to bind localhost:0"):
            create_server(_config())

    def test_bind_failure_runtime_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = MagicMock()
        fake.add_insecure_port.side_effect = RuntimeError("address in use")
        monkeypatch.setattr("token_manager.server.grpc.server", lambda *a, **kw: fake)
        with pytest.raises(TokenManagerError, match="address in use"):
            create_server(_config())

    def test_client_from_config(self, server_table: tuple[str, TokenTable]) -> None:
        address, _ = server_table
        config = _config(server_address=address, grpc_timeout_ms=2000)
        with TokenManagerClient.from_config(config) as c:
            assert c.create("cfg") is True
            assert c.drop("cfg") is True
