"""Flayer core: fee-redirection swap engine and collection shutdown engine."""

from flayer.protocol import FlayerProtocol, build_protocol

__version__ = "0.1.0"
__all__ = ["FlayerProtocol", "build_protocol", "__version__"]
