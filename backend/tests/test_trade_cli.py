from __future__ import annotations

import json

import pytest

from helpers import USER_PAYLOAD
from scripts.trade_cli import _run, parse_args


def test_parse_buy_arguments():
    args = parse_args(["--ephemeral", "buy", "m1", "yes", "12.5", "--idempotency-key", "k-1"])

    assert args.command == "buy"
    assert args.ephemeral is True
    assert args.outcome == "YES"
    assert args.stake == 12.5
    assert args.idempotency_key == "k-1"


def test_parse_rejects_unknown_outcome():
    with pytest.raises(SystemExit):
        parse_args(["preview", "m1", "maybe", "5"])


@pytest.mark.asyncio
async def test_trade_commands_require_a_session(context, fake_api):
    """Verify trading is refused without a stored credential."""
    exit_code = await _run(parse_args(["preview", "m1", "YES", "5"]), context)

    assert exit_code == 1
    assert fake_api.requests == []


@pytest.mark.asyncio
async def test_whoami_prints_rehydrated_identity(make_context, fake_api, storage, capsys):
    storage.set("auth_token", "stored")
    fake_api.add_json("GET", "/auth/me", {"user": USER_PAYLOAD})

    exit_code = await _run(parse_args(["whoami"]), make_context())

    assert exit_code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["id"] == "user-1"


@pytest.mark.asyncio
async def test_buy_prints_trade_result(make_context, fake_api, storage, capsys):
    storage.set("auth_token", "stored")
    fake_api.add_json("GET", "/auth/me", {"user": USER_PAYLOAD})
    fake_api.add_json(
        "POST",
        "/trade/buy",
        {"trade": {"id": "t1", "marketId": "m1", "outcome": "NO", "shares": 4}},
    )

    exit_code = await _run(parse_args(["buy", "m1", "no", "2"]), make_context())

    assert exit_code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["trade"]["id"] == "t1"
