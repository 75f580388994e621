from payment_manager.errors import AccountDecodeError

from .metadata import (
    Creator,
    MetadataData,
)
from .payment_manager import (
    PAYMENT_MANAGER_DISCRIMINATOR,
    PaymentManager,
)
from .token_account import (
    TokenAccount,
)

from payment_manager import program_ids as pids
from payment_manager.utils.solana import AccountParser


def account_parser(data):
    if data[:len(PAYMENT_MANAGER_DISCRIMINATOR)] == PAYMENT_MANAGER_DISCRIMINATOR:
        return PaymentManager.from_bytes(data)
    raise AccountDecodeError("Unknown payment manager account")


def default_parser() -> AccountParser:
    parser = AccountParser()
    parser.register_parser(pids.PAYMENT_MANAGER_PROGRAM_ID, account_parser)
    parser.register_parser(pids.TOKEN_METADATA_PROGRAM_ID, MetadataData.from_bytes)
    parser.register_parser(pids.SPL_TOKEN_PROGRAM_ID, TokenAccount.from_bytes)
    return parser


__all__ = [
    "Creator",
    "MetadataData",
    "PAYMENT_MANAGER_DISCRIMINATOR",
    "PaymentManager",
    "TokenAccount",
    "account_parser",
    "default_parser",
]
