"""Contract ABI loading and call selector decoding."""

import json
from pathlib import Path
from typing import Any

from eth_utils import encode_hex, function_abi_to_4byte_selector

BUNDLED_ABI_PATH = Path(__file__).parent / "DappVotes.json"


def load_abi(path: str | Path | None = None) -> list[dict[str, Any]]:
    """
    Load a contract ABI.

    Accepts a bare ABI list or a Hardhat artifact (``{"abi": [...]}``).
    Falls back to the bundled DappVotes ABI when no path is given.
    """
    source = Path(path) if path else BUNDLED_ABI_PATH
    with source.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("abi", [])
    if not isinstance(data, list):
        raise ValueError(f"No ABI found in {source}")
    return data


def function_selectors(abi: list[dict[str, Any]]) -> dict[str, str]:
    """Map ``0x``-prefixed 4-byte selectors to function names."""
    selectors: dict[str, str] = {}
    for entry in abi:
        if entry.get("type") != "function":
            continue
        selector = encode_hex(function_abi_to_4byte_selector(entry))
        selectors[selector.lower()] = entry["name"]
    return selectors


def decode_function_name(data: str, selectors: dict[str, str]) -> str | None:
    """Return the function named by the leading 4 bytes of call data."""
    payload = data[2:] if data.startswith(("0x", "0X")) else data
    if len(payload) < 8:
        return None
    return selectors.get(f"0x{payload[:8].lower()}")
