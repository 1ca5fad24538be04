from __future__ import annotations

import pytest

from gateway.normalize import (
    DEFAULT_DEPOSIT_NETWORK,
    extract_array,
    extract_total,
    normalize_deposit_addresses,
    normalize_list,
    normalize_pending_deposits,
)


@pytest.mark.parametrize(
    ("response", "expected"),
    [
        ([{"id": 1}], [{"id": 1}]),
        ({"markets": [{"id": 2}]}, [{"id": 2}]),
        ({"markets": "oops"}, []),
        ({"other": []}, []),
        (None, []),
        ("text", []),
    ],
)
def test_extract_array(response, expected):
    assert extract_array(response, "markets") == expected


def test_extract_total():
    assert extract_total({"total": 7, "markets": []}) == 7
    assert extract_total([1, 2, 3]) == 3
    assert extract_total([1, 2, 3], fallback_to_length=False) == 0
    assert extract_total({"total": True}) == 0
    assert extract_total(None) == 0


def test_normalize_list_falls_back_to_item_count():
    items, total = normalize_list({"positions": [{"id": "a"}, {"id": "b"}]}, "positions")

    assert [item["id"] for item in items] == ["a", "b"]
    assert total == 2
    assert normalize_list({"positions": [], "total": 40}, "positions") == ([], 40)


def test_deposit_addresses_from_address_list():
    response = {
        "addresses": [
            {"token": "ETH", "address": "0xeth"},
            {"token": "USDC", "address": "0xusdc"},
            {"token": "USDT"},
        ],
        "network": "Base Sepolia",
    }

    assert normalize_deposit_addresses(response) == {
        "ETH": {"address": "0xeth", "network": "Base Sepolia"},
        "USDC": {"address": "0xusdc", "network": "Base Sepolia"},
    }


def test_deposit_addresses_keyed_by_token():
    response = {
        "eth": {"address": "0xeth"},
        "USDT": {"address": "0xusdt", "network": "Mainnet"},
        "note": "ignored",
    }

    assert normalize_deposit_addresses(response) == {
        "ETH": {"address": "0xeth", "network": DEFAULT_DEPOSIT_NETWORK},
        "USDT": {"address": "0xusdt", "network": "Mainnet"},
    }


def test_deposit_addresses_unknown_shape_keeps_address_entries():
    response = {"DAI": {"address": "0xdai", "network": "Other"}, "meta": {"count": 1}}

    assert normalize_deposit_addresses(response) == {
        "DAI": {"address": "0xdai", "network": "Other"}
    }
    assert normalize_deposit_addresses([]) == {}


def test_pending_deposits_accept_both_shapes():
    deposit = {"id": "d1", "txHash": "0x1", "token": "ETH", "amount": 0.5}

    assert normalize_pending_deposits([deposit]) == [deposit]
    assert normalize_pending_deposits({"deposits": [deposit]}) == [deposit]
    assert normalize_pending_deposits({"success": True}) == []
