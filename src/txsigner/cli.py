"""
Command-line interface for the transaction signer.

Builds and signs transactions and prints the wire form. Nothing is broadcast.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, List

import structlog
from pydantic import ValidationError

from txsigner import __version__
from txsigner.api import TransactionService
from txsigner.config import SignerConfig, set_config
from txsigner.contract.abi import ContractMethod, EncodingError
from txsigner.node.interface import NodeTimeout, TransportError
from txsigner.node.jsonrpc import JsonRpcAdapter
from txsigner.tx.resolver import FieldResolutionTimeout
from txsigner.tx.signer import SigningError, TransactionDecodeError, decode_signed_transaction
from txsigner.tx.types import TransactionBuildError
from txsigner.validation import ContractCallProps, TransferProps

DEFAULT_KEY_ENV = "TXSIGNER_PRIVATE_KEY"


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr so stdout only carries the signed transaction
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def _add_node_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--rpc-url",
        help="JSON-RPC endpoint (default: TXSIGNER_RPC_URL or http://localhost:8545)",
    )
    parser.add_argument(
        "--chain-id",
        type=int,
        help="Chain ID for EIP-155 signing (default: unprotected legacy signing)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Deadline in seconds for each nonce / gas query",
    )
    parser.add_argument(
        "--gas-limit",
        help="Explicit gas limit (skips gas estimation)",
    )
    parser.add_argument(
        "--key-env",
        default=DEFAULT_KEY_ENV,
        help=f"Environment variable holding the private key (default: {DEFAULT_KEY_ENV})",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="evm-tx-signer",
        description="Prepare and sign EVM transactions",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Transfer command
    transfer_parser = subparsers.add_parser("transfer", help="Sign a plain transfer")
    transfer_parser.add_argument("--to", required=True, help="Recipient address")
    transfer_parser.add_argument("--value", required=True, help="Amount in wei")
    transfer_parser.add_argument("--data", default="", help="Hex payload")
    _add_node_arguments(transfer_parser)

    # Contract call command
    call_parser = subparsers.add_parser("call", help="Sign a contract call")
    call_parser.add_argument("--contract", required=True, help="Contract address")
    call_parser.add_argument(
        "--method",
        required=True,
        help="Method signature, e.g. 'transfer(address,uint256)'",
    )
    call_parser.add_argument(
        "--arg",
        dest="args",
        action="append",
        default=[],
        help="Method argument (repeat in order)",
    )
    call_parser.add_argument("--value", default="0", help="Wei attached to a payable call")
    call_parser.add_argument("--payable", action="store_true", help="Method is payable")
    _add_node_arguments(call_parser)

    # Decode command
    decode_parser = subparsers.add_parser("decode", help="Decode a signed transaction")
    decode_parser.add_argument("raw", help="Signed transaction hex")

    return parser


def coerce_args(types: List[str], raw_args: List[str]) -> List[Any]:
    """Convert command-line strings to the Python values eth-abi expects."""
    values: List[Any] = []
    for abi_type, raw in zip(types, raw_args):
        if abi_type.startswith(("uint", "int")) and "[" not in abi_type:
            values.append(int(raw, 0))
        elif abi_type == "bool":
            values.append(raw.lower() in ("1", "true", "yes"))
        elif abi_type.startswith("bytes") and "[" not in abi_type:
            values.append(bytes.fromhex(raw[2:] if raw.startswith("0x") else raw))
        elif "[" in abi_type or abi_type.startswith("("):
            values.append(json.loads(raw))
        else:
            values.append(raw)
    values.extend(raw_args[len(types):])
    return values


def _build_config(args: argparse.Namespace) -> SignerConfig:
    overrides = {
        "log_level": args.log_level,
        "log_json": args.log_json,
    }
    if args.rpc_url:
        overrides["rpc_url"] = args.rpc_url
    if args.chain_id is not None:
        overrides["chain_id"] = args.chain_id
    if args.timeout is not None:
        overrides["request_timeout_seconds"] = args.timeout

    config = SignerConfig(**overrides)
    set_config(config)
    return config


def _private_key(args: argparse.Namespace) -> str:
    key = os.getenv(args.key_env)
    if not key:
        raise SigningError(f"{args.key_env} environment variable not set")
    return key


async def sign_transfer(args: argparse.Namespace) -> str:
    """Build and sign a plain transfer."""
    config = _build_config(args)
    props = TransferProps(to=args.to, value=args.value, data=args.data, gas_limit=args.gas_limit)
    private_key = _private_key(args)

    async with JsonRpcAdapter(config) as node:
        service = TransactionService(node, config)
        return await service.build_and_sign_transfer(
            private_key, props.to, props.value, props.data, gas_limit=props.gas_limit
        )


async def sign_contract_call(args: argparse.Namespace) -> str:
    """Build and sign a contract call."""
    config = _build_config(args)
    props = ContractCallProps(
        contract_address=args.contract,
        method=args.method,
        args=args.args,
        value=args.value,
        gas_limit=args.gas_limit,
    )
    private_key = _private_key(args)

    async with JsonRpcAdapter(config) as node:
        service = TransactionService(node, config)
        method = ContractMethod.from_signature(
            props.method, props.contract_address, node, payable=args.payable
        )
        return await service.build_and_sign_contract_call(
            private_key,
            props.contract_address,
            method,
            coerce_args(method.input_types, props.args),
            value=props.value,
            gas_limit=props.gas_limit,
        )


def decode_transaction(raw: str) -> dict:
    """Decode a signed transaction into printable fields."""
    decoded = decode_signed_transaction(raw)
    tx = decoded.transaction
    return {
        "from": decoded.sender,
        "to": tx.to,
        "value": tx.value,
        "data": "0x" + tx.data.hex(),
        "nonce": tx.nonce,
        "gasPrice": tx.gas_price,
        "gas": tx.gas_limit,
        "chainId": tx.chain_id,
        "v": decoded.v,
        "r": hex(decoded.r),
        "s": hex(decoded.s),
    }


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Setup logging
    log_level = getattr(args, "log_level", "WARNING")
    log_json = getattr(args, "log_json", False)
    setup_logging(log_level, log_json)

    try:
        if args.command == "transfer":
            print(asyncio.run(sign_transfer(args)))
        elif args.command == "call":
            print(asyncio.run(sign_contract_call(args)))
        elif args.command == "decode":
            print(json.dumps(decode_transaction(args.raw), indent=2))
    except (
        ValidationError,
        EncodingError,
        TransportError,
        NodeTimeout,
        FieldResolutionTimeout,
        TransactionBuildError,
        TransactionDecodeError,
        SigningError,
        ValueError,
    ) as e:
        print(f"error: {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
