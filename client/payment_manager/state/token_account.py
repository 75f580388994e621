from dataclasses import dataclass

import borsh_construct as borsh
from construct import ConstructError
from solders.pubkey import Pubkey

from payment_manager.errors import AccountDecodeError
from .common import PUBKEY, to_pubkey

TOKEN_ACCOUNT_LEN = 165

layout = borsh.CStruct(
    "mint" / PUBKEY,
    "owner" / PUBKEY,
    "amount" / borsh.U64,
)


@dataclass
class TokenAccount:
    mint: Pubkey
    owner: Pubkey
    amount: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "TokenAccount":
        if len(data) != TOKEN_ACCOUNT_LEN:
            raise AccountDecodeError(f"Token account data must be {TOKEN_ACCOUNT_LEN} bytes, got {len(data)}")
        try:
            parsed = layout.parse(data)
        except ConstructError as e:
            raise AccountDecodeError(f"Malformed token account: {e}") from e
        return cls(mint=to_pubkey(parsed.mint), owner=to_pubkey(parsed.owner), amount=parsed.amount)
