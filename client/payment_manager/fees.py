"""Client-side settlement math for the payment manager program.

Every amount is an integer in the payment's base unit (lamports or token
base units). The functions here are pure and must agree, unit for unit,
with what the program pays out to each position of the instruction's
remaining accounts.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from payment_manager.errors import (
    InvalidBasisPoints,
    InvalidCreatorShares,
    InvalidPaymentAmount,
)

BASIS_POINTS_DIVISOR = 10_000
CREATOR_SHARE_DIVISOR = 100
DEFAULT_BUY_SIDE_FEE_SHARE = 50
DEFAULT_ROYALTY_FEE_SHARE = 0


class Settlement(Enum):
    NATIVE = "native"
    TOKEN = "token"


@dataclass(frozen=True)
class FeeConfig:
    maker_fee_basis_points: int
    taker_fee_basis_points: int
    include_seller_fee_basis_points: bool = False
    royalty_fee_share: Optional[int] = None

    @staticmethod
    def from_payment_manager(payment_manager) -> "FeeConfig":
        return FeeConfig(
            maker_fee_basis_points=payment_manager.maker_fee_basis_points,
            taker_fee_basis_points=payment_manager.taker_fee_basis_points,
            include_seller_fee_basis_points=payment_manager.include_seller_fee_basis_points,
            royalty_fee_share=payment_manager.royalty_fee_share,
        )

    def validate(self):
        check_basis_points("maker_fee_basis_points", self.maker_fee_basis_points)
        check_basis_points("taker_fee_basis_points", self.taker_fee_basis_points)
        if self.royalty_fee_share is not None:
            check_basis_points("royalty_fee_share", self.royalty_fee_share)


@dataclass(frozen=True)
class FeeBreakdown:
    payment_amount: int
    settlement: Settlement
    has_buy_side_receiver: bool
    maker_fee: int
    taker_fee: int
    seller_fee: int
    total_fees: int
    royalty_pool: int
    # one entry per creator with a nonzero share, in remaining-accounts order
    creator_amounts: List[int] = field(default_factory=list)
    buy_side_fee: int = 0
    fee_collector_amount: int = 0
    payment_target_amount: int = 0

    @property
    def paid_to_creators(self) -> int:
        return sum(self.creator_amounts)

    @property
    def payer_total(self) -> int:
        # the taker fee is charged on top of the payment amount
        return self.payment_amount + self.taker_fee


def check_basis_points(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidBasisPoints(name, value)
    if value < 0 or value > BASIS_POINTS_DIVISOR:
        raise InvalidBasisPoints(name, value)
    return value


def check_creator_shares(shares: Sequence[int]):
    for i, share in enumerate(shares):
        if isinstance(share, bool) or not isinstance(share, int) or not 0 <= share <= CREATOR_SHARE_DIVISOR:
            raise InvalidCreatorShares(f"creator {i} share must be within 0..100, got {share!r}")
    total = sum(shares)
    if total > CREATOR_SHARE_DIVISOR:
        raise InvalidCreatorShares(f"creator shares sum to {total}, more than 100")


def apply_basis_points(amount: int, basis_points: int) -> int:
    return amount * basis_points // BASIS_POINTS_DIVISOR


def split_royalties(royalty_pool: int, shares: Sequence[int]) -> List[int]:
    """Splits `royalty_pool` by creator shares out of 100.

    Each creator gets the floor of its share; the rounding remainder is then
    handed out one unit at a time to the first creators in order. When the
    shares sum to less than 100 the remainder can exceed the creator count,
    and the units left over are not assigned to anyone.
    """
    check_creator_shares(shares)
    amounts = [royalty_pool * share // CREATOR_SHARE_DIVISOR for share in shares]
    remainder = royalty_pool - sum(amounts)
    for i in range(min(remainder, len(amounts))):
        amounts[i] += 1
    return amounts


def calc_fees(
        payment_amount: int,
        config: FeeConfig,
        seller_fee_basis_points: int = 0,
        creator_shares: Sequence[int] = (),
        settlement: Settlement = Settlement.NATIVE,
        has_buy_side_receiver: bool = True,
        buy_side_fee_share: int = DEFAULT_BUY_SIDE_FEE_SHARE,
) -> FeeBreakdown:
    if isinstance(payment_amount, bool) or not isinstance(payment_amount, int) or payment_amount < 0:
        raise InvalidPaymentAmount(payment_amount)
    config.validate()
    check_basis_points("seller_fee_basis_points", seller_fee_basis_points)
    check_basis_points("buy_side_fee_share", buy_side_fee_share)

    maker_fee = apply_basis_points(payment_amount, config.maker_fee_basis_points)
    taker_fee = apply_basis_points(payment_amount, config.taker_fee_basis_points)
    fee_pool = maker_fee + taker_fee

    seller_fee = 0
    if config.include_seller_fee_basis_points:
        seller_fee = apply_basis_points(payment_amount, seller_fee_basis_points)

    royalty_fee_share = config.royalty_fee_share
    if royalty_fee_share is None:
        royalty_fee_share = DEFAULT_ROYALTY_FEE_SHARE
    # the seller fee always goes to creators in full
    royalty_pool = apply_basis_points(fee_pool, royalty_fee_share) + seller_fee
    total_fees = fee_pool + seller_fee

    creator_amounts = split_royalties(royalty_pool, [s for s in creator_shares if s != 0])
    paid_to_creators = sum(creator_amounts)

    buy_side_fee = apply_basis_points(payment_amount, buy_side_fee_share)
    fee_collector_amount = total_fees - paid_to_creators
    if not has_buy_side_receiver:
        # the undelivered buy side cut is collected in both settlements
        fee_collector_amount += buy_side_fee
    elif settlement is Settlement.NATIVE:
        fee_collector_amount -= buy_side_fee

    return FeeBreakdown(
        payment_amount=payment_amount,
        settlement=settlement,
        has_buy_side_receiver=has_buy_side_receiver,
        maker_fee=maker_fee,
        taker_fee=taker_fee,
        seller_fee=seller_fee,
        total_fees=total_fees,
        royalty_pool=royalty_pool,
        creator_amounts=creator_amounts,
        buy_side_fee=buy_side_fee,
        fee_collector_amount=fee_collector_amount,
        payment_target_amount=payment_amount + taker_fee - total_fees - buy_side_fee,
    )


def calc_payment_fees(
        payment_amount: int,
        payment_manager,
        metadata=None,
        settlement: Settlement = Settlement.NATIVE,
        has_buy_side_receiver: bool = True,
        buy_side_fee_share: int = DEFAULT_BUY_SIDE_FEE_SHARE,
) -> FeeBreakdown:
    """`calc_fees` for a decoded payment manager and mint metadata.

    A mint without (readable) metadata pays no seller fee and has no
    creators, so the whole royalty pool stays with the fee collector.
    """
    seller_fee_basis_points = 0
    creator_shares: List[int] = []
    if metadata is not None:
        seller_fee_basis_points = metadata.seller_fee_basis_points
        creator_shares = [creator.share for creator in metadata.creators]

    return calc_fees(
        payment_amount,
        FeeConfig.from_payment_manager(payment_manager),
        seller_fee_basis_points=seller_fee_basis_points,
        creator_shares=creator_shares,
        settlement=settlement,
        has_buy_side_receiver=has_buy_side_receiver,
        buy_side_fee_share=buy_side_fee_share,
    )
