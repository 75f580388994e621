from construct import Bytes
from solders.pubkey import Pubkey

from payment_manager.errors import AccountDecodeError

PUBKEY = Bytes(32)
DISCRIMINATOR_LEN = 8


def to_pubkey(raw: bytes) -> Pubkey:
    return Pubkey.from_bytes(bytes(raw))


def strip_padding(value: str) -> str:
    return value.rstrip("\x00")


def check_discriminator(data: bytes, expected: bytes, account_name: str) -> bytes:
    if len(data) < DISCRIMINATOR_LEN or data[:DISCRIMINATOR_LEN] != expected:
        raise AccountDecodeError(f"Account data is not a {account_name}")
    return data[DISCRIMINATOR_LEN:]
