"""
Contract module.

Handles ABI encoding of contract calls and contract-specific gas estimation.
"""

from txsigner.contract.abi import Contract, ContractMethod, EncodingError
from txsigner.contract.erc20 import ERC20_ABI, erc20

__all__ = [
    "Contract",
    "ContractMethod",
    "EncodingError",
    "ERC20_ABI",
    "erc20",
]
