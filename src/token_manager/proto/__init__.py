"""gRPC protocol buffer stubs for the token manager service.

Contains hand-written message classes and service stubs that are
functionally equivalent to protoc-generated code but avoid the build-time
proto compilation step. ``token_manager.proto`` documents the contract.
"""
