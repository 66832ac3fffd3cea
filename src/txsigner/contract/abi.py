"""
Contract ABI encoding.

Binds ABI function fragments to a contract address and a node handle, and
produces call data and gas estimates for contract invocations.
"""

from typing import Any, Dict, List, Optional, Sequence

from eth_abi import encode as abi_encode
from eth_abi.exceptions import ParseError
from eth_abi.grammar import parse as parse_abi_type
from eth_utils import function_signature_to_4byte_selector, is_address, to_checksum_address

from txsigner.node.interface import NodeInterface


class EncodingError(Exception):
    """Raised when a contract call cannot be ABI encoded."""
    pass


def _canonical_type(param: Dict[str, Any]) -> str:
    """Get the canonical ABI type of a parameter, expanding tuples."""
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        components = ",".join(_canonical_type(c) for c in param.get("components", []))
        return f"({components}){abi_type[len('tuple'):]}"
    return abi_type


def _split_types(types: str) -> List[str]:
    """Split a comma separated type list into canonical type strings."""
    try:
        parsed = parse_abi_type(f"({types})")
    except ParseError as e:
        raise EncodingError(f"Invalid parameter types: {types!r}") from e
    return [component.to_type_str() for component in parsed.components]


class ContractMethod:
    """
    A single contract function bound to a contract address.

    Encodes calls as ``selector + abi.encode(inputs)`` and estimates gas
    through the node handle it was created with.
    """

    def __init__(
        self,
        fragment: Dict[str, Any],
        address: str,
        node: Optional[NodeInterface] = None,
    ):
        """
        Initialize the contract method.

        Args:
            fragment: ABI function fragment
            address: Contract address
            node: Node interface used for gas estimation
        """
        if fragment.get("type", "function") != "function" or "name" not in fragment:
            raise EncodingError(f"Not a function ABI fragment: {fragment!r}")
        if not is_address(address):
            raise EncodingError(f"Invalid contract address: {address!r}")

        self.fragment = fragment
        self.address = to_checksum_address(address)
        self.node = node
        self.name: str = fragment["name"]
        self.input_types: List[str] = [_canonical_type(p) for p in fragment.get("inputs", [])]

    @classmethod
    def from_signature(
        cls,
        signature: str,
        address: str,
        node: Optional[NodeInterface] = None,
        payable: bool = False,
    ) -> "ContractMethod":
        """
        Create a method from a text signature such as ``transfer(address,uint256)``.
        """
        signature = signature.replace(" ", "")
        if "(" not in signature or not signature.endswith(")"):
            raise EncodingError(f"Invalid method signature: {signature!r}")

        name, _, types = signature.partition("(")
        fragment = {
            "type": "function",
            "name": name,
            "inputs": [{"name": "", "type": t} for t in _split_types(types[:-1])],
            "stateMutability": "payable" if payable else "nonpayable",
        }
        return cls(fragment, address, node)

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    @property
    def payable(self) -> bool:
        """Whether the method accepts ether along with the call."""
        if "stateMutability" in self.fragment:
            return self.fragment["stateMutability"] == "payable"
        return bool(self.fragment.get("payable", False))

    def encode_call(self, args: Sequence[Any]) -> bytes:
        """
        Encode a call to this method.

        Args:
            args: Positional method arguments

        Returns:
            Call data (4-byte selector followed by the encoded arguments)

        Raises:
            EncodingError: On argument count or type mismatch
        """
        args = list(args)
        if len(args) != len(self.input_types):
            raise EncodingError(
                f"{self.signature} expects {len(self.input_types)} arguments, got {len(args)}"
            )

        try:
            encoded = abi_encode(self.input_types, args)
        except Exception as e:
            raise EncodingError(f"Cannot encode arguments for {self.signature}: {e}") from e

        return self.selector + encoded

    async def estimate_gas(self, sender: str, args: Sequence[Any], value: int = 0) -> int:
        """
        Estimate gas for calling this method from ``sender``.

        Raises:
            EncodingError: If the call cannot be encoded
            TransportError: If the estimation query fails
        """
        if self.node is None:
            raise RuntimeError(f"No node bound to {self.signature} for gas estimation")

        call = {
            "from": sender,
            "to": self.address,
            "value": value,
            "data": self.encode_call(args),
        }
        return await self.node.estimate_gas(call)

    def __repr__(self) -> str:
        return f"<ContractMethod {self.signature} at {self.address}>"


class Contract:
    """
    Contract bound to an address and an ABI.

    Methods are looked up by name or, for overloaded functions, by full signature.
    """

    def __init__(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        node: Optional[NodeInterface] = None,
    ):
        if not is_address(address):
            raise EncodingError(f"Invalid contract address: {address!r}")

        self.address = to_checksum_address(address)
        self.abi = abi
        self.node = node

        self._by_signature: Dict[str, ContractMethod] = {}
        self._by_name: Dict[str, List[ContractMethod]] = {}

        for fragment in abi:
            if fragment.get("type", "function") != "function":
                continue
            method = ContractMethod(fragment, address, node)
            self._by_signature[method.signature] = method
            self._by_name.setdefault(method.name, []).append(method)

    @property
    def method_names(self) -> List[str]:
        return sorted(self._by_name)

    def method(self, name: str) -> ContractMethod:
        """
        Get a contract method.

        Args:
            name: Method name or full signature

        Raises:
            EncodingError: If the method is unknown or the name is ambiguous
        """
        if name in self._by_signature:
            return self._by_signature[name]

        candidates = self._by_name.get(name)
        if not candidates:
            raise EncodingError(f"Unknown contract method: {name}")
        if len(candidates) > 1:
            options = ", ".join(m.signature for m in candidates)
            raise EncodingError(f"Ambiguous method {name}; use one of: {options}")
        return candidates[0]

    def __getitem__(self, name: str) -> ContractMethod:
        return self.method(name)
