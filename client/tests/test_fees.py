"""Unit tests for payment settlement math."""

import pytest
from solders.pubkey import Pubkey

from payment_manager.errors import InvalidBasisPoints, InvalidCreatorShares, InvalidPaymentAmount
from payment_manager.fees import (
    FeeConfig,
    Settlement,
    calc_fees,
    calc_payment_fees,
    check_basis_points,
    split_royalties,
)
from payment_manager.state import Creator, MetadataData, PaymentManager

ONE_SOL = 1_000_000_000

REFERENCE_CONFIG = FeeConfig(
    maker_fee_basis_points=500,
    taker_fee_basis_points=300,
    include_seller_fee_basis_points=True,
    royalty_fee_share=4500,
)


class TestReferenceScenario:
    """1 SOL paid for a token with three creators under the reference policy."""

    def test_native_with_buy_side_receiver(self):
        breakdown = calc_fees(ONE_SOL, REFERENCE_CONFIG, seller_fee_basis_points=100, creator_shares=[15, 30, 55])

        assert breakdown.maker_fee == 50_000_000
        assert breakdown.taker_fee == 30_000_000
        assert breakdown.seller_fee == 10_000_000
        assert breakdown.total_fees == 90_000_000
        assert breakdown.royalty_pool == 46_000_000
        assert breakdown.creator_amounts == [6_900_000, 13_800_000, 25_300_000]
        assert breakdown.paid_to_creators == breakdown.royalty_pool
        assert breakdown.buy_side_fee == 5_000_000
        assert breakdown.fee_collector_amount == 39_000_000

    def test_payment_target_gets_taker_fee_back(self):
        breakdown = calc_fees(ONE_SOL, REFERENCE_CONFIG, seller_fee_basis_points=100, creator_shares=[15, 30, 55])

        # P - total fees - buy side fee + taker fee
        assert breakdown.payment_target_amount == 935_000_000
        assert breakdown.payer_total == 1_030_000_000

    def test_token_settlement_keeps_buy_side_out_of_collector(self):
        breakdown = calc_fees(
            ONE_SOL,
            REFERENCE_CONFIG,
            seller_fee_basis_points=100,
            creator_shares=[15, 30, 55],
            settlement=Settlement.TOKEN,
        )

        assert breakdown.settlement is Settlement.TOKEN
        assert breakdown.fee_collector_amount == 44_000_000
        assert breakdown.payment_target_amount == 935_000_000

    def test_token_settlement_without_receiver_sends_buy_side_to_collector(self):
        breakdown = calc_fees(
            ONE_SOL,
            REFERENCE_CONFIG,
            seller_fee_basis_points=100,
            creator_shares=[15, 30, 55],
            settlement=Settlement.TOKEN,
            has_buy_side_receiver=False,
        )

        assert breakdown.fee_collector_amount == 49_000_000

    def test_native_without_receiver(self):
        breakdown = calc_fees(
            ONE_SOL,
            REFERENCE_CONFIG,
            seller_fee_basis_points=100,
            creator_shares=[15, 30, 55],
            has_buy_side_receiver=False,
        )

        assert not breakdown.has_buy_side_receiver
        # the buy side cut nobody receives is collected
        assert breakdown.fee_collector_amount == 49_000_000

    @pytest.mark.parametrize("settlement", [Settlement.NATIVE, Settlement.TOKEN])
    def test_payer_outlay_fully_distributed_without_receiver(self, settlement):
        breakdown = calc_fees(
            ONE_SOL,
            REFERENCE_CONFIG,
            seller_fee_basis_points=100,
            creator_shares=[15, 30, 55],
            settlement=settlement,
            has_buy_side_receiver=False,
        )

        paid_out = breakdown.payment_target_amount + breakdown.fee_collector_amount + breakdown.paid_to_creators
        assert paid_out == breakdown.payer_total


class TestFeeConfig:
    """Seller fee inclusion, royalty share defaults and the zero payment."""

    def test_seller_fee_excluded(self):
        config = FeeConfig(500, 300, include_seller_fee_basis_points=False, royalty_fee_share=4500)
        breakdown = calc_fees(ONE_SOL, config, seller_fee_basis_points=100, creator_shares=[15, 30, 55])

        assert breakdown.seller_fee == 0
        assert breakdown.total_fees == 80_000_000
        assert breakdown.royalty_pool == 36_000_000

    def test_missing_royalty_share_counts_as_zero(self):
        config = FeeConfig(500, 300, include_seller_fee_basis_points=True)
        breakdown = calc_fees(ONE_SOL, config, seller_fee_basis_points=100, creator_shares=[100])

        # only the seller fee reaches creators
        assert breakdown.royalty_pool == 10_000_000
        assert breakdown.creator_amounts == [10_000_000]

    def test_zero_payment(self):
        breakdown = calc_fees(0, REFERENCE_CONFIG, seller_fee_basis_points=100, creator_shares=[15, 30, 55])

        assert breakdown.total_fees == 0
        assert breakdown.creator_amounts == [0, 0, 0]
        assert breakdown.buy_side_fee == 0
        assert breakdown.fee_collector_amount == 0
        assert breakdown.payment_target_amount == 0

    def test_zero_shares_are_not_paid(self):
        breakdown = calc_fees(ONE_SOL, REFERENCE_CONFIG, seller_fee_basis_points=100, creator_shares=[0, 40, 0, 60])

        assert len(breakdown.creator_amounts) == 2
        assert breakdown.paid_to_creators == 46_000_000

    def test_fees_may_exceed_payment_combined(self):
        config = FeeConfig(10_000, 10_000)
        breakdown = calc_fees(1_000, config)

        assert breakdown.maker_fee == 1_000
        assert breakdown.taker_fee == 1_000
        assert breakdown.total_fees == 2_000


class TestRoyaltySplit:
    """Front-loaded remainder distribution."""

    def test_exact_split_loses_no_dust(self):
        for pool in (1, 7, 99, 46_000_001, 123_456_789):
            assert sum(split_royalties(pool, [15, 30, 55])) == pool

    def test_remainder_goes_to_first_creators(self):
        # floors are 3, 3, 3 and the one leftover unit goes to the first creator
        assert split_royalties(10, [33, 33, 34]) == [4, 3, 3]
        assert split_royalties(3, [50, 50]) == [2, 1]

    def test_remainder_capped_at_one_unit_per_creator(self):
        # shares sum to 20, so 80 units stay unassigned beyond one extra each
        assert split_royalties(100, [10, 10]) == [11, 11]

    def test_unassigned_dust_stays_with_collector(self):
        config = FeeConfig(0, 0, include_seller_fee_basis_points=True)
        breakdown = calc_fees(10_000, config, seller_fee_basis_points=10_000, creator_shares=[10, 10])

        assert breakdown.creator_amounts == [1_001, 1_001]
        assert breakdown.fee_collector_amount == 10_000 - 2_002 - breakdown.buy_side_fee

    def test_shares_over_100_rejected(self):
        with pytest.raises(InvalidCreatorShares):
            split_royalties(100, [60, 50])

    def test_share_out_of_range_rejected(self):
        with pytest.raises(InvalidCreatorShares):
            split_royalties(100, [101])

    def test_no_creators(self):
        assert split_royalties(500, []) == []


class TestValidation:
    """Configuration errors are raised before any computation."""

    @pytest.mark.parametrize("value", [-1, 10_001, 1.5, True, None])
    def test_invalid_basis_points(self, value):
        with pytest.raises(InvalidBasisPoints) as exc:
            check_basis_points("maker_fee_basis_points", value)
        assert exc.value.field == "maker_fee_basis_points"
        assert "maker_fee_basis_points" in str(exc.value)

    def test_bounds_accepted(self):
        assert check_basis_points("taker_fee_basis_points", 0) == 0
        assert check_basis_points("taker_fee_basis_points", 10_000) == 10_000

    def test_invalid_config_names_field(self):
        with pytest.raises(InvalidBasisPoints) as exc:
            calc_fees(100, FeeConfig(500, 300, royalty_fee_share=20_000))
        assert exc.value.field == "royalty_fee_share"

    def test_invalid_seller_fee(self):
        with pytest.raises(InvalidBasisPoints):
            calc_fees(100, REFERENCE_CONFIG, seller_fee_basis_points=10_001)

    def test_negative_payment(self):
        with pytest.raises(InvalidPaymentAmount):
            calc_fees(-1, REFERENCE_CONFIG)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            calc_fees(100, FeeConfig(-5, 0))


class TestCalcPaymentFees:
    """Fees from decoded accounts."""

    def _payment_manager(self):
        return PaymentManager(
            bump=255,
            name="foobar",
            authority=Pubkey.new_unique(),
            fee_collector=Pubkey.new_unique(),
            maker_fee_basis_points=500,
            taker_fee_basis_points=300,
            include_seller_fee_basis_points=True,
            royalty_fee_share=4500,
        )

    def test_from_metadata(self):
        mint = Pubkey.new_unique()
        metadata = MetadataData(
            update_authority=Pubkey.new_unique(),
            mint=mint,
            name="n",
            symbol="s",
            uri="u",
            seller_fee_basis_points=100,
            creators=[
                Creator(Pubkey.new_unique(), True, 15),
                Creator(Pubkey.new_unique(), False, 0),
                Creator(Pubkey.new_unique(), False, 30),
                Creator(Pubkey.new_unique(), False, 55),
            ],
        )

        breakdown = calc_payment_fees(ONE_SOL, self._payment_manager(), metadata)

        assert breakdown.creator_amounts == [6_900_000, 13_800_000, 25_300_000]
        assert breakdown.fee_collector_amount == 39_000_000

    def test_without_metadata(self):
        breakdown = calc_payment_fees(ONE_SOL, self._payment_manager(), None)

        assert breakdown.seller_fee == 0
        assert breakdown.creator_amounts == []
        # royalty pool of the maker and taker fees stays with the collector
        assert breakdown.royalty_pool == 36_000_000
        assert breakdown.fee_collector_amount == 80_000_000 - 5_000_000
