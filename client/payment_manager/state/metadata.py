from dataclasses import dataclass, field
from typing import List

import borsh_construct as borsh
from construct import ConstructError
from solders.pubkey import Pubkey

from payment_manager.errors import AccountDecodeError
from .common import PUBKEY, strip_padding, to_pubkey

METADATA_V1_KEY = 4

creator_layout = borsh.CStruct(
    "address" / PUBKEY,
    "verified" / borsh.Bool,
    "share" / borsh.U8,
)

# only the prefix up to the creators is read, the rest of the account is ignored
layout = borsh.CStruct(
    "key" / borsh.U8,
    "update_authority" / PUBKEY,
    "mint" / PUBKEY,
    "name" / borsh.String,
    "symbol" / borsh.String,
    "uri" / borsh.String,
    "seller_fee_basis_points" / borsh.U16,
    "creators" / borsh.Option(borsh.Vec(creator_layout)),
)


@dataclass
class Creator:
    address: Pubkey
    verified: bool
    share: int


@dataclass
class MetadataData:
    update_authority: Pubkey
    mint: Pubkey
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int
    creators: List[Creator] = field(default_factory=list)

    @property
    def paid_creators(self) -> List[Creator]:
        return [creator for creator in self.creators if creator.share != 0]

    @classmethod
    def from_bytes(cls, data: bytes) -> "MetadataData":
        if not data or data[0] != METADATA_V1_KEY:
            raise AccountDecodeError("Account data is not token metadata")
        try:
            parsed = layout.parse(data)
        except (ConstructError, UnicodeDecodeError) as e:
            raise AccountDecodeError(f"Malformed token metadata: {e}") from e
        creators = [
            Creator(address=to_pubkey(c.address), verified=c.verified, share=c.share)
            for c in (parsed.creators or [])
        ]
        return cls(
            update_authority=to_pubkey(parsed.update_authority),
            mint=to_pubkey(parsed.mint),
            name=strip_padding(parsed.name),
            symbol=strip_padding(parsed.symbol),
            uri=strip_padding(parsed.uri),
            seller_fee_basis_points=parsed.seller_fee_basis_points,
            creators=creators,
        )

    def to_bytes(self) -> bytes:
        return layout.build(
            {
                "key": METADATA_V1_KEY,
                "update_authority": bytes(self.update_authority),
                "mint": bytes(self.mint),
                "name": self.name,
                "symbol": self.symbol,
                "uri": self.uri,
                "seller_fee_basis_points": self.seller_fee_basis_points,
                "creators": [
                    {"address": bytes(c.address), "verified": c.verified, "share": c.share}
                    for c in self.creators
                ] if self.creators else None,
            }
        )
