"""Helpers that accept both bare-list and wrapped-object list responses."""

from __future__ import annotations

from typing import Any

DEFAULT_DEPOSIT_NETWORK = "Ethereum Sepolia Testnet"
_DEPOSIT_TOKENS = {"ETH", "USDC", "USDT"}


def extract_array(response: Any, key: str) -> list[Any]:
    if not response:
        return []
    if isinstance(response, list):
        return response
    if isinstance(response, dict):
        data = response.get(key)
        if isinstance(data, list):
            return data
    return []


def extract_total(response: Any, *, fallback_to_length: bool = True) -> int:
    if not response:
        return 0
    if isinstance(response, list):
        return len(response) if fallback_to_length else 0
    if isinstance(response, dict):
        total = response.get("total")
        if isinstance(total, (int, float)) and not isinstance(total, bool):
            return int(total)
    return 0


def normalize_list(response: Any, key: str) -> tuple[list[Any], int]:
    """Return ``(items, total)``; a missing or zero total falls back to the item count."""

    items = extract_array(response, key)
    total = extract_total(response)
    return items, total or len(items)


def normalize_deposit_addresses(response: Any) -> dict[str, dict[str, str]]:
    """Map token symbol to ``{"address", "network"}`` across both server shapes."""

    if not isinstance(response, dict):
        return {}

    addresses = response.get("addresses")
    if isinstance(addresses, list):
        network = response.get("network") or DEFAULT_DEPOSIT_NETWORK
        return {
            str(entry["token"]): {"address": str(entry["address"]), "network": network}
            for entry in addresses
            if isinstance(entry, dict) and entry.get("token") and entry.get("address")
        }

    result: dict[str, dict[str, str]] = {}
    for key, value in response.items():
        if key.upper() not in _DEPOSIT_TOKENS:
            continue
        if isinstance(value, dict) and value.get("address"):
            result[key.upper()] = {
                "address": str(value["address"]),
                "network": value.get("network") or DEFAULT_DEPOSIT_NETWORK,
            }
    if result:
        return result

    return {
        key: value
        for key, value in response.items()
        if isinstance(value, dict) and "address" in value
    }


def normalize_pending_deposits(response: Any) -> list[Any]:
    return extract_array(response, "deposits")


__all__ = [
    "DEFAULT_DEPOSIT_NETWORK",
    "extract_array",
    "extract_total",
    "normalize_deposit_addresses",
    "normalize_list",
    "normalize_pending_deposits",
]
