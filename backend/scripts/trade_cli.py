import argparse
import asyncio
import json
import sys

from loguru import logger

from app.context import AppContext, build_context
from app.core.config import get_settings
from app.storage import MemoryStorage
from gateway.client import RequestFailed
from gateway.health import HealthChecker


def _add_trade_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("market_id")
    parser.add_argument("outcome", type=str.upper, choices=["YES", "NO"])
    parser.add_argument("stake", type=float)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sign in and trade against the market API")
    parser.add_argument("--verbose", action="store_true", help="Log requests at debug level")
    parser.add_argument(
        "--ephemeral",
        action="store_true",
        help="Keep the credential in memory only instead of the configured storage",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    request_otp = commands.add_parser("request-otp", help="Email a one-time sign-in code")
    request_otp.add_argument("email")

    verify_otp = commands.add_parser("verify-otp", help="Exchange an emailed code for a session")
    verify_otp.add_argument("email")
    verify_otp.add_argument("code")

    wallet_login = commands.add_parser(
        "wallet-login", help="Sign in by signing a wallet challenge (signature pasted at a prompt)"
    )
    wallet_login.add_argument("address")

    commands.add_parser("whoami", help="Rehydrate the stored session and print the identity")

    markets = commands.add_parser("markets", help="List markets")
    markets.add_argument("--category", default=None)
    markets.add_argument("--status", default=None)
    markets.add_argument("--limit", type=int, default=20)

    _add_trade_arguments(commands.add_parser("preview", help="Quote a buy"))
    buy = commands.add_parser("buy", help="Buy shares")
    _add_trade_arguments(buy)
    buy.add_argument(
        "--idempotency-key",
        default=None,
        help="Reuse the key of a failed attempt to retry that same order",
    )

    sell = commands.add_parser("sell", help="Sell shares of a position")
    sell.add_argument("position_id")
    sell.add_argument("shares", type=float)

    commands.add_parser("logout", help="End the session and forget the credential")
    commands.add_parser("health", help="Probe the remote API endpoints")
    return parser.parse_args(argv)


def _print(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _prompt_signature(message: str) -> str:
    print("Sign this message with your wallet, exactly as shown:\n")
    print(message)
    signature = input("\nSignature (empty to decline): ").strip()
    if not signature:
        raise RuntimeError("User declined to sign the message")
    return signature


async def _run(args: argparse.Namespace, context: AppContext) -> int:
    session = context.session
    trading = context.trading

    if args.command == "health":
        report = await HealthChecker(settings=context.settings).run()
        _print(report.model_dump(mode="json"))
        return 0 if report.status == "healthy" else 1

    if args.command == "request-otp":
        ok = await session.request_otp(args.email)
    elif args.command == "verify-otp":
        ok = await session.verify_otp(args.email, args.code)
    elif args.command == "wallet-login":
        ok = await session.login_with_wallet(args.address, _prompt_signature)
    elif args.command == "logout":
        await session.logout()
        ok = True
    elif args.command == "markets":
        try:
            response = await context.api.list_markets(
                category=args.category, status=args.status, limit=args.limit
            )
        except RequestFailed as exc:
            logger.error(exc.message)
            return 1
        _print([market.model_dump(mode="json") for market in response.markets])
        return 0
    else:
        await session.check_auth()
        if not session.get().authenticated:
            logger.error("Not signed in; run request-otp/verify-otp or wallet-login first")
            return 1
        if args.command == "whoami":
            ok = True
        elif args.command == "preview":
            preview = await trading.fetch_preview(args.market_id, args.outcome, args.stake)
            if preview is not None:
                _print(preview.model_dump(mode="json"))
            ok = preview is not None
        elif args.command == "buy":
            result = await trading.execute_buy(
                args.market_id, args.outcome, args.stake, idempotency_key=args.idempotency_key
            )
            if result is not None:
                _print(result.model_dump(mode="json"))
            ok = result is not None
        else:
            result = await trading.execute_sell(args.position_id, args.shares)
            if result is not None:
                _print(result.model_dump(mode="json"))
            ok = result is not None

    state = session.get()
    if state.last_error:
        logger.error(state.last_error)
    if args.command == "preview" and trading.get().error:
        logger.error(trading.get().error)
    if state.identity is not None and args.command in {"verify-otp", "wallet-login", "whoami"}:
        _print(state.identity.model_dump(mode="json"))
    return 0 if ok else 1


async def _main(args: argparse.Namespace) -> int:
    settings = get_settings()
    storage = MemoryStorage() if args.ephemeral else None
    async with build_context(settings, storage=storage) as context:
        return await _run(args, context)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")
    sys.exit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
