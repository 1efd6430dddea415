"""
ABI Dispatcher - Parse a contract ABI once into typed call and event handles.

A ContractInterface maps each function signature to a ContractFunction
(selector, argument encoder, result decoder) and each event name to a
ContractEvent (topic, log decoder). ABIs may be given as a list, a JSON
string, or a path to a JSON file (plain ABI or Foundry/Hardhat artifact).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from eth_abi import decode, encode
from eth_hash.auto import keccak

from ..errors import AbiError
from ..sigil.wallet import to_checksum_address

AbiSource = Union[list, str, Path, "ContractInterface"]


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def _canonical_type(param: dict[str, Any]) -> str:
    """Collapse tuple components into eth-abi's "(t1,t2)[]" notation."""
    typ = param["type"]
    if typ.startswith("tuple"):
        inner = ",".join(_canonical_type(c) for c in param.get("components", []))
        return f"({inner}){typ[len('tuple'):]}"
    return typ


def _is_dynamic(typ: str) -> bool:
    return typ in ("string", "bytes") or typ.endswith("]") or typ.startswith("(")


def _normalize(typ: str, value: Any) -> Any:
    # eth-abi decodes addresses lowercase
    if typ == "address" and isinstance(value, str):
        return to_checksum_address(value)
    return value


@dataclass(frozen=True)
class ContractFunction:
    name: str
    input_types: tuple[str, ...]
    output_types: tuple[str, ...]
    state_mutability: str = "nonpayable"

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def selector(self) -> bytes:
        # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
        return keccak(self.signature.encode("utf-8"))[:4]

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability in ("view", "pure")

    def encode_input(self, args: Sequence[Any]) -> str:
        """ABI-encode a call to 0x-prefixed hex calldata."""
        if len(args) != len(self.input_types):
            raise AbiError(
                f"{self.signature} takes {len(self.input_types)} arguments, "
                f"got {len(args)}"
            )
        encoded = encode(list(self.input_types), list(args)) if self.input_types else b""
        return "0x" + (self.selector + encoded).hex()

    def decode_output(self, data: str) -> Any:
        """
        ABI-decode a call result.

        Returns:
            None for functions without outputs, the single value for one
            output, otherwise a tuple
        """
        if not self.output_types:
            return None
        decoded = decode(list(self.output_types), bytes.fromhex(_strip_0x(data)))
        values = tuple(_normalize(t, v) for t, v in zip(self.output_types, decoded))
        if len(values) == 1:
            return values[0]
        return values


@dataclass(frozen=True)
class EventInput:
    name: str
    type: str
    indexed: bool


@dataclass(frozen=True)
class ContractEvent:
    name: str
    inputs: tuple[EventInput, ...]
    anonymous: bool = False

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(i.type for i in self.inputs)})"

    @property
    def topic(self) -> str:
        return "0x" + keccak(self.signature.encode("utf-8")).hex()

    def decode_log(self, log: dict[str, Any]) -> list[Any]:
        """
        Decode a log entry into positional arguments in ABI order.

        Indexed dynamic values (strings, bytes, arrays, tuples) are only
        present as their Keccak hash and are returned as 0x-hex.
        """
        topics = list(log.get("topics", []))
        indexed_topics = topics if self.anonymous else topics[1:]
        indexed_count = sum(1 for i in self.inputs if i.indexed)
        if len(indexed_topics) < indexed_count:
            raise AbiError(
                f"Log has {len(indexed_topics)} indexed topics, "
                f"{self.signature} expects {indexed_count}"
            )

        data_types = [i.type for i in self.inputs if not i.indexed]
        raw = bytes.fromhex(_strip_0x(log.get("data") or "0x"))
        data_values = iter(decode(data_types, raw) if data_types else ())
        topic_values = iter(indexed_topics)

        args: list[Any] = []
        for inp in self.inputs:
            if not inp.indexed:
                args.append(_normalize(inp.type, next(data_values)))
                continue
            topic = bytes.fromhex(_strip_0x(next(topic_values)))
            if _is_dynamic(inp.type):
                args.append("0x" + topic.hex())
            else:
                args.append(_normalize(inp.type, decode([inp.type], topic)[0]))
        return args


@lru_cache(maxsize=16)
def _load_abi_file(path: str) -> tuple:
    with Path(path).open("r", encoding="utf-8") as f:
        artifact = json.load(f)
    return tuple(_unwrap_artifact(artifact))


def _unwrap_artifact(value: Any) -> list:
    if isinstance(value, dict) and "abi" in value:
        value = value["abi"]
    if not isinstance(value, list):
        raise AbiError("ABI must be a JSON array of entries")
    return value


def load_abi(source: AbiSource) -> list[dict[str, Any]]:
    """
    Normalise an ABI source into a list of entries.

    Args:
        source: ABI list, JSON text, path to a JSON file, or ContractInterface

    Returns:
        ABI as a list of dicts
    """
    if isinstance(source, ContractInterface):
        return source.abi
    if isinstance(source, list):
        return source
    if isinstance(source, str) and source.lstrip().startswith(("[", "{")):
        return _unwrap_artifact(json.loads(source))
    return list(_load_abi_file(str(Path(source).expanduser().resolve())))


class ContractInterface:
    """Typed view of an ABI: functions by signature, events by name."""

    def __init__(self, abi: AbiSource) -> None:
        self.abi = load_abi(abi)
        self.functions: dict[str, ContractFunction] = {}
        self.events: dict[str, ContractEvent] = {}
        self._by_name: dict[str, list[ContractFunction]] = {}

        for entry in self.abi:
            kind = entry.get("type", "function")
            if kind == "function":
                self._add_function(entry)
            elif kind == "event":
                self._add_event(entry)

    def _add_function(self, entry: dict[str, Any]) -> None:
        mutability = entry.get("stateMutability") or (
            "view" if entry.get("constant") else "nonpayable"
        )
        func = ContractFunction(
            name=entry["name"],
            input_types=tuple(_canonical_type(p) for p in entry.get("inputs", [])),
            output_types=tuple(_canonical_type(p) for p in entry.get("outputs", [])),
            state_mutability=mutability,
        )
        self.functions[func.signature] = func
        self._by_name.setdefault(func.name, []).append(func)

    def _add_event(self, entry: dict[str, Any]) -> None:
        event = ContractEvent(
            name=entry["name"],
            inputs=tuple(
                EventInput(
                    name=p.get("name", ""),
                    type=_canonical_type(p),
                    indexed=bool(p.get("indexed", False)),
                )
                for p in entry.get("inputs", [])
            ),
            anonymous=bool(entry.get("anonymous", False)),
        )
        self.events[event.name] = event

    def get_function(self, name: str, arg_count: Optional[int] = None) -> ContractFunction:
        """
        Resolve a function by full signature ("transfer(address,uint256)")
        or by bare name. Overloaded names are disambiguated by argument count.

        Raises:
            AbiError: If no function (or more than one) matches
        """
        if "(" in name:
            func = self.functions.get(name)
            if func is None:
                raise AbiError(f"Function {name} not found in ABI")
            return func

        candidates = self._by_name.get(name, [])
        if arg_count is not None and len(candidates) > 1:
            candidates = [f for f in candidates if len(f.input_types) == arg_count]
        if not candidates:
            raise AbiError(f"Function {name} not found in ABI")
        if len(candidates) > 1:
            options = ", ".join(f.signature for f in candidates)
            raise AbiError(f"Function {name} is ambiguous: {options}")
        return candidates[0]

    def get_event(self, name: str) -> ContractEvent:
        event = self.events.get(name)
        if event is None:
            raise AbiError(f"Event {name} not found in ABI")
        return event


def as_interface(abi: AbiSource) -> ContractInterface:
    if isinstance(abi, ContractInterface):
        return abi
    return ContractInterface(abi)


# ============ Standard ABIs ============


def _fn(name: str, inputs: list[str], outputs: list[str], mutability: str = "view") -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": "", "type": t} for t in inputs],
        "outputs": [{"name": "", "type": t} for t in outputs],
        "stateMutability": mutability,
    }


def _transfer_event(value_indexed: bool) -> dict:
    return {
        "type": "event",
        "name": "Transfer",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": value_indexed},
        ],
    }


ERC20_ABI: list[dict[str, Any]] = [
    _fn("name", [], ["string"]),
    _fn("symbol", [], ["string"]),
    _fn("decimals", [], ["uint8"]),
    _fn("totalSupply", [], ["uint256"]),
    _fn("balanceOf", ["address"], ["uint256"]),
    _fn("allowance", ["address", "address"], ["uint256"]),
    _fn("transfer", ["address", "uint256"], ["bool"], "nonpayable"),
    _fn("approve", ["address", "uint256"], ["bool"], "nonpayable"),
    _transfer_event(value_indexed=False),
]

ERC721_ABI: list[dict[str, Any]] = [
    _fn("name", [], ["string"]),
    _fn("symbol", [], ["string"]),
    _fn("totalSupply", [], ["uint256"]),
    _fn("balanceOf", ["address"], ["uint256"]),
    _fn("ownerOf", ["uint256"], ["address"]),
    _fn("tokenURI", ["uint256"], ["string"]),
    _fn("tokenByIndex", ["uint256"], ["uint256"]),
    _fn("tokenOfOwnerByIndex", ["address", "uint256"], ["uint256"]),
    _fn("safeMint", ["address", "uint256"], [], "nonpayable"),
    _transfer_event(value_indexed=True),
]
