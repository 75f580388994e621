from dataclasses import dataclass
from typing import Optional

import borsh_construct as borsh
from construct import ConstructError
from solders.pubkey import Pubkey

from payment_manager.errors import AccountDecodeError
from payment_manager.utils.solana import account_discriminator
from .common import PUBKEY, check_discriminator, to_pubkey

PAYMENT_MANAGER_DISCRIMINATOR = account_discriminator("PaymentManager")

layout = borsh.CStruct(
    "bump" / borsh.U8,
    "name" / borsh.String,
    "authority" / PUBKEY,
    "fee_collector" / PUBKEY,
    "maker_fee_basis_points" / borsh.U16,
    "taker_fee_basis_points" / borsh.U16,
    "include_seller_fee_basis_points" / borsh.Bool,
    "royalty_fee_share" / borsh.Option(borsh.U64),
)


@dataclass
class PaymentManager:
    bump: int
    name: str
    authority: Pubkey
    fee_collector: Pubkey
    maker_fee_basis_points: int
    taker_fee_basis_points: int
    include_seller_fee_basis_points: bool
    royalty_fee_share: Optional[int] = None

    @classmethod
    def from_bytes(cls, data: bytes) -> "PaymentManager":
        body = check_discriminator(data, PAYMENT_MANAGER_DISCRIMINATOR, "PaymentManager")
        try:
            parsed = layout.parse(body)
        except (ConstructError, UnicodeDecodeError) as e:
            raise AccountDecodeError(f"Malformed PaymentManager data: {e}") from e
        return cls(
            bump=parsed.bump,
            name=parsed.name,
            authority=to_pubkey(parsed.authority),
            fee_collector=to_pubkey(parsed.fee_collector),
            maker_fee_basis_points=parsed.maker_fee_basis_points,
            taker_fee_basis_points=parsed.taker_fee_basis_points,
            include_seller_fee_basis_points=parsed.include_seller_fee_basis_points,
            royalty_fee_share=parsed.royalty_fee_share,
        )

    def to_bytes(self) -> bytes:
        return PAYMENT_MANAGER_DISCRIMINATOR + layout.build(
            {
                "bump": self.bump,
                "name": self.name,
                "authority": bytes(self.authority),
                "fee_collector": bytes(self.fee_collector),
                "maker_fee_basis_points": self.maker_fee_basis_points,
                "taker_fee_basis_points": self.taker_fee_basis_points,
                "include_seller_fee_basis_points": self.include_seller_fee_basis_points,
                "royalty_fee_share": self.royalty_fee_share,
            }
        )
