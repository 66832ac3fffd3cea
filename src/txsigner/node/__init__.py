"""
Node Integration Layer.

Provides abstracted access to the network queries needed for transaction preparation.
"""

from txsigner.node.interface import NodeInterface, NodeTimeout, TransportError
from txsigner.node.jsonrpc import JsonRpcAdapter

__all__ = [
    "NodeInterface",
    "NodeTimeout",
    "TransportError",
    "JsonRpcAdapter",
]
