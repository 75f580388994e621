"""Remaining accounts for royalty-aware payments.

The payment manager program pays creator N out of remaining account N and
the buy side receiver out of the account after the last creator. It cannot
tell a misordered list from a correct one, so the order produced here is
the whole contract: creators with a nonzero share in metadata order, then
the buy side receiver.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from spl.token.instructions import create_associated_token_account

from payment_manager import program_ids as pids
from payment_manager.accounts import (
    MetadataStatus,
    get_largest_token_account,
    get_token_account,
    read_creator_metadata,
    try_get_payment_manager,
)
from payment_manager.addrs import (
    get_destination_addr,
    get_mint_metadata_addr,
    is_native_currency,
)
from payment_manager.errors import RetryableRpcError
from payment_manager.state import Creator, MetadataData
from payment_manager.utils.solana import TransactionBuilder, account_exists, to_account_meta

logger = logging.getLogger(__name__)


@dataclass
class RoyaltyAccounts:
    addresses: List[Pubkey] = field(default_factory=list)
    setup_instructions: List[Instruction] = field(default_factory=list)
    # creators paid by this payment, aligned with the first len(creators) addresses
    creators: List[Creator] = field(default_factory=list)
    metadata: Optional[MetadataData] = None
    metadata_status: str = MetadataStatus.ABSENT
    buy_side_receiver: Optional[Pubkey] = None

    @property
    def degraded(self) -> bool:
        return self.metadata is None

    @property
    def shares(self) -> List[int]:
        return [creator.share for creator in self.creators]

    def to_account_metas(self) -> List[AccountMeta]:
        return [to_account_meta(addr, is_signer=False, is_writable=True) for addr in self.addresses]


def _pending_create(address: Pubkey):
    def pending(instructions: List[Instruction]) -> bool:
        for ix in instructions:
            if ix.program_id == pids.ASSOCIATED_TOKEN_PROGRAM_ID and len(ix.accounts) > 1 \
                    and ix.accounts[1].pubkey == address:
                return True
        return False

    return pending


def find_destination(payment_mint: Optional[Pubkey], owner: Pubkey) -> Pubkey:
    return get_destination_addr(payment_mint, owner)


def _init_destination(
        tx: TransactionBuilder,
        payment_mint: Optional[Pubkey],
        owner: Pubkey,
        payer: Pubkey,
        client=None,
) -> Tuple[Pubkey, Optional[Instruction]]:
    destination = get_destination_addr(payment_mint, owner)
    if is_native_currency(payment_mint):
        return destination, None
    # only the first caller for an address may create it, even across threads
    if not tx.claim(destination, _pending_create(destination)):
        return destination, None
    try:
        exists = account_exists(destination, client)
    except RetryableRpcError:
        tx.release(destination)
        raise
    if exists:
        return destination, None
    logger.debug("creating token account %s for %s", destination, owner)
    ix = create_associated_token_account(payer, owner, payment_mint)
    tx.add(ix)
    return destination, ix


def find_or_init_destination(
        tx: TransactionBuilder,
        payment_mint: Optional[Pubkey],
        owner: Pubkey,
        payer: Pubkey,
        client=None,
) -> Pubkey:
    """Destination of `owner` for `payment_mint`, created in `tx` if missing.

    Native payments need no account. For tokens the associated token
    account is looked up and, when it does not exist yet and `tx` does not
    already create it, a create instruction is appended to `tx`.
    """
    return _init_destination(tx, payment_mint, owner, payer, client)[0]


def _resolve_creators(
        tx: TransactionBuilder,
        creators: Iterable[Creator],
        payment_mint: Optional[Pubkey],
        payer: Pubkey,
        exclude_creators: Iterable[Pubkey],
        client=None,
) -> Tuple[List[Pubkey], List[Instruction]]:
    excluded = {bytes(c) for c in exclude_creators}
    addresses = []
    setup = []
    for creator in creators:
        if creator.share == 0:
            continue
        if bytes(creator.address) in excluded:
            addresses.append(find_destination(payment_mint, creator.address))
            continue
        destination, ix = _init_destination(tx, payment_mint, creator.address, payer, client)
        addresses.append(destination)
        if ix is not None:
            setup.append(ix)
    return addresses, setup


def build_royalty_accounts(
        mint: Pubkey,
        payment_mint: Optional[Pubkey],
        payer: Pubkey,
        exclude_creators: Iterable[Pubkey] = (),
        buy_side_receiver: Optional[Pubkey] = None,
        tx: Optional[TransactionBuilder] = None,
        client=None,
) -> RoyaltyAccounts:
    """Remaining accounts of a royalty payment for `mint` paid in `payment_mint`.

    Setup instructions are appended to `tx` (a fresh buffer when omitted)
    and also reported on the result. Metadata that is missing or does not
    decode leaves the royalty list empty; only the buy side receiver, if
    any, is returned then.
    """
    if tx is None:
        tx = TransactionBuilder(fee_payer=payer)

    metadata, status = read_creator_metadata(mint, client)
    creators: List[Creator] = []
    addresses: List[Pubkey] = []
    setup: List[Instruction] = []
    if metadata is None:
        logger.warning("mint %s has %s metadata, paying without royalties", mint, status)
    else:
        creators = metadata.paid_creators
        if not creators:
            logger.debug("mint %s has no creators with a share", mint)
        addresses, setup = _resolve_creators(tx, creators, payment_mint, payer, exclude_creators, client)

    if buy_side_receiver is not None:
        addresses.append(buy_side_receiver)

    return RoyaltyAccounts(
        addresses=addresses,
        setup_instructions=setup,
        creators=creators,
        metadata=metadata,
        metadata_status=status,
        buy_side_receiver=buy_side_receiver,
    )


def with_remaining_accounts_for_handle_payment_with_royalties(
        tx: TransactionBuilder,
        mint: Pubkey,
        payment_mint: Optional[Pubkey],
        payer: Pubkey,
        exclude_creators: Iterable[Pubkey] = (),
        buy_side_receiver: Optional[Pubkey] = None,
        client=None,
) -> List[AccountMeta]:
    return build_royalty_accounts(
        mint,
        payment_mint,
        payer,
        exclude_creators=exclude_creators,
        buy_side_receiver=buy_side_receiver,
        tx=tx,
        client=client,
    ).to_account_metas()


def with_remaining_accounts_for_payment(
        tx: TransactionBuilder,
        mint: Pubkey,
        payment_mint: Pubkey,
        issuer: Pubkey,
        payment_manager: Pubkey,
        payer: Pubkey,
        receipt_mint: Optional[Pubkey] = None,
        client=None,
) -> Tuple[Pubkey, Pubkey, List[AccountMeta]]:
    """Accounts a program paying through the payment manager passes along.

    Returns the payment destination, the fee collector token account and
    the remaining accounts `[receipt token account?, payment mint, mint,
    mint metadata, *royalty accounts]`. The payment goes to the holder of
    `receipt_mint` when one is given and to `issuer` otherwise.

    `payer` is both the fee payer and the signing wallet. A recipient equal
    to it is assumed to hold its token account already, so none is created
    for it; call with the wallet that signs the payment when the two differ.
    """
    royalty_accounts = with_remaining_accounts_for_handle_payment_with_royalties(
        tx,
        mint,
        payment_mint,
        payer,
        exclude_creators=[issuer],
        client=client,
    )
    payment_accounts = [
        to_account_meta(payment_mint, is_signer=False, is_writable=True),
        to_account_meta(mint, is_signer=False, is_writable=True),
        to_account_meta(get_mint_metadata_addr(mint), is_signer=False, is_writable=True),
    ]

    receipt_accounts = []
    if receipt_mint is not None:
        receipt_token_account = get_largest_token_account(receipt_mint, client)
        recipient = get_token_account(receipt_token_account, client).owner
        receipt_accounts.append(to_account_meta(receipt_token_account, is_signer=False, is_writable=True))
    else:
        recipient = issuer

    if recipient == payer:
        payment_destination = find_destination(payment_mint, recipient)
    else:
        payment_destination = find_or_init_destination(tx, payment_mint, recipient, payer, client)

    record = try_get_payment_manager(payment_manager, client)
    fee_collector = record.fee_collector if record is not None else payment_manager
    fee_collector_destination = find_or_init_destination(tx, payment_mint, fee_collector, payer, client)

    return (
        payment_destination,
        fee_collector_destination,
        receipt_accounts + payment_accounts + royalty_accounts,
    )
