"""Decoding of on-chain accounts."""

import pytest
from solders.pubkey import Pubkey

from payment_manager import program_ids as pids
from payment_manager.accounts import get_payment_manager, get_token_account
from payment_manager.errors import AccountDecodeError
from payment_manager.state import (
    PAYMENT_MANAGER_DISCRIMINATOR,
    Creator,
    MetadataData,
    PaymentManager,
    TokenAccount,
    account_parser,
    default_parser,
)
from payment_manager.utils.solana import AccountDetails, AccountParser, Context, account_discriminator

from conftest import token_account_data


def make_payment_manager(**overrides):
    fields = dict(
        bump=254,
        name="foobar",
        authority=Pubkey.new_unique(),
        fee_collector=Pubkey.new_unique(),
        maker_fee_basis_points=500,
        taker_fee_basis_points=300,
        include_seller_fee_basis_points=True,
        royalty_fee_share=4500,
    )
    fields.update(overrides)
    return PaymentManager(**fields)


class TestPaymentManager:
    """Anchor PaymentManager account layout."""

    def test_discriminator(self):
        assert PAYMENT_MANAGER_DISCRIMINATOR == account_discriminator("PaymentManager")
        assert len(PAYMENT_MANAGER_DISCRIMINATOR) == 8

    def test_decode(self):
        record = make_payment_manager()
        data = record.to_bytes()

        assert data.startswith(PAYMENT_MANAGER_DISCRIMINATOR)
        assert PaymentManager.from_bytes(data) == record

    def test_decode_without_royalty_share(self):
        record = make_payment_manager(royalty_fee_share=None)

        assert PaymentManager.from_bytes(record.to_bytes()).royalty_fee_share is None

    def test_wrong_discriminator(self):
        data = bytes(8) + make_payment_manager().to_bytes()[8:]

        with pytest.raises(AccountDecodeError):
            PaymentManager.from_bytes(data)

    def test_truncated(self):
        with pytest.raises(AccountDecodeError):
            PaymentManager.from_bytes(make_payment_manager().to_bytes()[:20])


class TestMetadata:
    """Token metadata prefix up to the creators."""

    def test_decode_creators_in_order(self):
        creators = [Creator(Pubkey.new_unique(), True, 15), Creator(Pubkey.new_unique(), False, 85)]
        metadata = MetadataData(
            update_authority=Pubkey.new_unique(),
            mint=Pubkey.new_unique(),
            name="Receipt\x00\x00\x00",
            symbol="RCPT",
            uri="https://example.com",
            seller_fee_basis_points=250,
            creators=creators,
        )

        decoded = MetadataData.from_bytes(metadata.to_bytes() + bytes(64))

        assert decoded.name == "Receipt"
        assert decoded.seller_fee_basis_points == 250
        assert decoded.creators == creators

    def test_no_creators(self):
        metadata = MetadataData(Pubkey.new_unique(), Pubkey.new_unique(), "a", "b", "c", 0)

        decoded = MetadataData.from_bytes(metadata.to_bytes())

        assert decoded.creators == []
        assert decoded.paid_creators == []

    def test_paid_creators_skip_zero_shares(self):
        first = Creator(Pubkey.new_unique(), True, 0)
        second = Creator(Pubkey.new_unique(), True, 100)
        metadata = MetadataData(Pubkey.new_unique(), Pubkey.new_unique(), "a", "b", "c", 0, [first, second])

        assert metadata.paid_creators == [second]

    @pytest.mark.parametrize("data", [b"", b"\x01" + bytes(100), b"\x04" + b"\xff" * 10])
    def test_garbage(self, data):
        with pytest.raises(AccountDecodeError):
            MetadataData.from_bytes(data)


class TestTokenAccount:
    def test_decode(self):
        mint, owner = Pubkey.new_unique(), Pubkey.new_unique()

        account = TokenAccount.from_bytes(token_account_data(mint, owner, 42))

        assert account == TokenAccount(mint=mint, owner=owner, amount=42)

    def test_wrong_length(self):
        with pytest.raises(AccountDecodeError):
            TokenAccount.from_bytes(bytes(64))


class TestAccountParser:
    """Owner-keyed parser registry."""

    def test_parses_by_owner(self, client):
        record = make_payment_manager()
        address = Pubkey.new_unique()
        client.set_account(address, pids.PAYMENT_MANAGER_PROGRAM_ID, record.to_bytes())

        details = AccountDetails(address, client.accounts[address])

        assert details.parse(default_parser()) == record

    def test_unknown_owner(self):
        account = type("Account", (), {"owner": Pubkey.new_unique(), "data": b"\x00"})()

        with pytest.raises(ValueError):
            default_parser().parse(account)

    def test_unknown_payment_manager_account(self):
        with pytest.raises(AccountDecodeError):
            account_parser(bytes(16))

    def test_reads_decode_with_global_parser(self, client):
        address = Pubkey.new_unique()
        client.set_account(address, pids.PAYMENT_MANAGER_PROGRAM_ID, make_payment_manager().to_bytes())
        parser = AccountParser()
        parser.register_parser(pids.PAYMENT_MANAGER_PROGRAM_ID, lambda data: "decoded")
        Context.set_global_parser(parser)

        assert get_payment_manager(address) == "decoded"

    def test_reads_fall_back_to_default_parser(self, client):
        record = make_payment_manager()
        address = Pubkey.new_unique()
        client.set_account(address, pids.PAYMENT_MANAGER_PROGRAM_ID, record.to_bytes())
        Context.set_global_parser(None)

        assert get_payment_manager(address) == record

    def test_token_account_owner_checked(self, client):
        address = Pubkey.new_unique()
        client.set_account(address, Pubkey.new_unique(), token_account_data(Pubkey.new_unique(), Pubkey.new_unique()))

        with pytest.raises(AccountDecodeError):
            get_token_account(address)
