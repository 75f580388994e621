import argparse
import json
import logging

import base58
from solana.rpc.api import Client
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from payment_manager import actions
from payment_manager.accounts import get_payment_manager_by_name, read_creator_metadata
from payment_manager.addrs import DEFAULT_PAYMENT_MANAGER_NAME, get_payment_manager_addr
from payment_manager.errors import PaymentManagerError
from payment_manager.fees import Settlement, calc_payment_fees
from payment_manager.state import default_parser
from payment_manager.utils.solana import Context

URLS = {
    "devnet": "https://api.devnet.solana.com",
    "dev": "https://api.devnet.solana.com",
    "localnet": "http://localhost:8899/",
    "local": "http://localhost:8899/",
    "mainnet": "https://api.mainnet-beta.solana.com/",
    "mainnet-beta": "https://api.mainnet-beta.solana.com/",
}


def pubkey_arg(value: str) -> Pubkey:
    try:
        raw = base58.b58decode(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value} is not base58")
    if len(raw) != 32:
        raise argparse.ArgumentTypeError(f"{value} is not a 32 byte address")
    return Pubkey.from_bytes(raw)


def load_keypair(path: str) -> Keypair:
    with open(path, "r") as f:
        kp = json.load(f)
    return Keypair.from_bytes(bytes(kp))


def _to_json(obj):
    return json.dumps(
        {k: str(v) if isinstance(v, Pubkey) else v for k, v in vars(obj).items()},
        indent=2,
    )


def get(args):
    payment_manager = get_payment_manager_by_name(args.name)
    print(f"Found payment manager {args.name} ({get_payment_manager_addr(args.name)})")
    print(_to_json(payment_manager))


def create(args):
    payer = Context.get_global_fee_payer().pubkey()
    _, signature = actions.init_payment_manager(
        payer,
        args.name,
        fee_collector=args.fee_collector,
        maker_fee_basis_points=args.maker_fee_basis_points,
        taker_fee_basis_points=args.taker_fee_basis_points,
        include_seller_fee_basis_points=args.include_seller_fee_basis_points,
        royalty_fee_share=args.royalty_fee_share,
        authority=args.authority,
    )
    print(f"Created payment manager {args.name} ({get_payment_manager_addr(args.name)}): {signature}")


def update(args):
    payer = Context.get_global_fee_payer().pubkey()
    _, signature = actions.update_payment_manager(
        payer,
        args.name,
        authority=args.authority,
        fee_collector=args.fee_collector,
        maker_fee_basis_points=args.maker_fee_basis_points,
        taker_fee_basis_points=args.taker_fee_basis_points,
        royalty_fee_share=args.royalty_fee_share,
    )
    print(f"Updated payment manager {args.name}: {signature}")


def close(args):
    payer = Context.get_global_fee_payer().pubkey()
    _, signature = actions.close_payment_manager(payer, args.name, collector=args.collector)
    print(f"Closed payment manager {args.name}: {signature}")


def quote(args):
    payment_manager = get_payment_manager_by_name(args.name)
    metadata, status = read_creator_metadata(args.mint)
    breakdown = calc_payment_fees(
        args.amount,
        payment_manager,
        metadata,
        settlement=Settlement.TOKEN if args.token else Settlement.NATIVE,
        has_buy_side_receiver=args.buy_side_receiver,
    )
    print(f"metadata: {status}")
    fields = {k: v.value if isinstance(v, Settlement) else v for k, v in vars(breakdown).items()}
    print(json.dumps(fields, indent=2))


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--network", default="devnet")
    ap.add_argument("--keypair", default=None)
    ap.add_argument("--verbose", "-v", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("get")
    p.add_argument("name", nargs="?", default=DEFAULT_PAYMENT_MANAGER_NAME)
    p.set_defaults(func=get)

    p = sub.add_parser("create")
    p.add_argument("name")
    p.add_argument("--fee-collector", type=pubkey_arg, required=True)
    p.add_argument("--authority", type=pubkey_arg, default=None)
    p.add_argument("--maker-fee-basis-points", type=int, required=True)
    p.add_argument("--taker-fee-basis-points", type=int, required=True)
    p.add_argument("--include-seller-fee-basis-points", action="store_true")
    p.add_argument("--royalty-fee-share", type=int, default=None)
    p.set_defaults(func=create)

    p = sub.add_parser("update")
    p.add_argument("name")
    p.add_argument("--fee-collector", type=pubkey_arg, default=None)
    p.add_argument("--authority", type=pubkey_arg, default=None)
    p.add_argument("--maker-fee-basis-points", type=int, default=None)
    p.add_argument("--taker-fee-basis-points", type=int, default=None)
    p.add_argument("--royalty-fee-share", type=int, default=None)
    p.set_defaults(func=update)

    p = sub.add_parser("close")
    p.add_argument("name")
    p.add_argument("--collector", type=pubkey_arg, default=None)
    p.set_defaults(func=close)

    p = sub.add_parser("quote")
    p.add_argument("name")
    p.add_argument("mint", type=pubkey_arg)
    p.add_argument("amount", type=int)
    p.add_argument("--token", action="store_true")
    p.add_argument("--no-buy-side-receiver", dest="buy_side_receiver", action="store_false")
    p.set_defaults(func=quote)

    args = ap.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    signers = []
    fee_payer = None
    if args.keypair is not None:
        fee_payer = load_keypair(args.keypair)
        signers.append((fee_payer, "payer"))
    elif args.command in ("create", "update", "close"):
        ap.error(f"{args.command} needs --keypair")

    Context.init_globals(
        fee_payer=fee_payer,
        client=Client(URLS.get(args.network, args.network)),
        signers=signers,
        parser=default_parser(),
        raise_on_error=True,
    )
    try:
        args.func(args)
    except PaymentManagerError as e:
        print(f"Error: {e}")
        if e.retryable:
            print("The request can be retried.")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
