import logging
from enum import Enum
from typing import Iterable, Optional, Tuple

from solders.pubkey import Pubkey

import payment_manager.instructions as ixs
from payment_manager import program_ids as pids
from payment_manager.accounts import get_payment_manager, try_get_payment_manager
from payment_manager.addrs import get_mint_metadata_addr, get_payment_manager_addr
from payment_manager.errors import (
    MissingAuthority,
    PaymentManagerAlreadyExists,
    Unauthorized,
)
from payment_manager.fees import FeeConfig, check_basis_points
from payment_manager.royalties import build_royalty_accounts
from payment_manager.state import PaymentManager
from payment_manager.utils.solana import TransactionBuilder

logger = logging.getLogger(__name__)


class PaymentManagerState(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


def get_payment_manager_state(name: str, client=None) -> PaymentManagerState:
    # a closed record is indistinguishable from one never created
    if try_get_payment_manager(get_payment_manager_addr(name), client) is None:
        return PaymentManagerState.UNINITIALIZED
    return PaymentManagerState.ACTIVE


def with_init(
        tx: TransactionBuilder,
        name: str,
        fee_collector: Pubkey,
        maker_fee_basis_points: int,
        taker_fee_basis_points: int,
        include_seller_fee_basis_points: bool,
        authority: Pubkey,
        royalty_fee_share: Optional[int] = None,
        payer: Optional[Pubkey] = None,
        client=None,
) -> Tuple[TransactionBuilder, Pubkey]:
    if authority is None:
        raise MissingAuthority()
    if fee_collector is None:
        raise MissingAuthority("fee_collector")
    FeeConfig(
        maker_fee_basis_points=maker_fee_basis_points,
        taker_fee_basis_points=taker_fee_basis_points,
        include_seller_fee_basis_points=include_seller_fee_basis_points,
        royalty_fee_share=royalty_fee_share,
    ).validate()

    payment_manager = get_payment_manager_addr(name)
    if try_get_payment_manager(payment_manager, client) is not None:
        raise PaymentManagerAlreadyExists(payment_manager, name)

    logger.debug("initializing payment manager %s at %s", name, payment_manager)
    tx.add(
        ixs.init_ix(
            payment_manager=payment_manager,
            authority=authority,
            payer=payer if payer is not None else authority,
            name=name,
            fee_collector=fee_collector,
            maker_fee_basis_points=maker_fee_basis_points,
            taker_fee_basis_points=taker_fee_basis_points,
            include_seller_fee_basis_points=include_seller_fee_basis_points,
            royalty_fee_share=royalty_fee_share,
        )
    )
    return tx, payment_manager


def with_update(
        tx: TransactionBuilder,
        name: str,
        signer: Pubkey,
        authority: Optional[Pubkey] = None,
        fee_collector: Optional[Pubkey] = None,
        maker_fee_basis_points: Optional[int] = None,
        taker_fee_basis_points: Optional[int] = None,
        royalty_fee_share: Optional[int] = None,
        client=None,
) -> Tuple[TransactionBuilder, PaymentManager]:
    """Appends an update of payment manager `name`, signed by `signer`.

    Arguments left as None keep the value stored on chain. Returns the
    record as it will read once the update lands.
    """
    for field_name, value in (
            ("maker_fee_basis_points", maker_fee_basis_points),
            ("taker_fee_basis_points", taker_fee_basis_points),
            ("royalty_fee_share", royalty_fee_share),
    ):
        if value is not None:
            check_basis_points(field_name, value)

    payment_manager = get_payment_manager_addr(name)
    current = get_payment_manager(payment_manager, client, name=name)
    if signer != current.authority:
        raise Unauthorized(signer, current.authority, f"update payment manager {name!r}")

    updated = PaymentManager(
        bump=current.bump,
        name=current.name,
        authority=authority if authority is not None else current.authority,
        fee_collector=fee_collector if fee_collector is not None else current.fee_collector,
        maker_fee_basis_points=(
            maker_fee_basis_points if maker_fee_basis_points is not None else current.maker_fee_basis_points
        ),
        taker_fee_basis_points=(
            taker_fee_basis_points if taker_fee_basis_points is not None else current.taker_fee_basis_points
        ),
        include_seller_fee_basis_points=current.include_seller_fee_basis_points,
        royalty_fee_share=royalty_fee_share if royalty_fee_share is not None else current.royalty_fee_share,
    )
    tx.add(
        ixs.update_ix(
            payment_manager=payment_manager,
            payer=signer,
            authority=updated.authority,
            fee_collector=updated.fee_collector,
            maker_fee_basis_points=updated.maker_fee_basis_points,
            taker_fee_basis_points=updated.taker_fee_basis_points,
            royalty_fee_share=updated.royalty_fee_share,
        )
    )
    return tx, updated


def with_close(
        tx: TransactionBuilder,
        name: str,
        closer: Pubkey,
        collector: Optional[Pubkey] = None,
        client=None,
) -> TransactionBuilder:
    payment_manager = get_payment_manager_addr(name)
    current = get_payment_manager(payment_manager, client, name=name)
    if closer != current.authority and closer != pids.CRANK_KEY:
        raise Unauthorized(closer, current.authority, f"close payment manager {name!r}")

    logger.debug("closing payment manager %s (%s) as %s", name, payment_manager, closer)
    tx.add(
        ixs.close_ix(
            payment_manager=payment_manager,
            collector=collector if collector is not None else closer,
            closer=closer,
        )
    )
    return tx


def with_manage_payment(
        tx: TransactionBuilder,
        name: str,
        payment_amount: int,
        payer: Pubkey,
        payer_token_account: Pubkey,
        fee_collector_token_account: Pubkey,
        payment_token_account: Pubkey,
) -> TransactionBuilder:
    tx.add(
        ixs.manage_payment_ix(
            payment_manager=get_payment_manager_addr(name),
            payer_token_account=payer_token_account,
            fee_collector_token_account=fee_collector_token_account,
            payment_token_account=payment_token_account,
            payer=payer,
            payment_amount=payment_amount,
        )
    )
    return tx


def with_handle_payment_with_royalties(
        tx: TransactionBuilder,
        name: str,
        payment_amount: int,
        mint: Pubkey,
        payment_mint: Pubkey,
        payer: Pubkey,
        payer_token_account: Pubkey,
        fee_collector_token_account: Pubkey,
        payment_token_account: Pubkey,
        buy_side_token_account: Optional[Pubkey] = None,
        exclude_creators: Iterable[Pubkey] = (),
        client=None,
) -> TransactionBuilder:
    royalties = build_royalty_accounts(
        mint,
        payment_mint,
        payer,
        exclude_creators=exclude_creators,
        buy_side_receiver=buy_side_token_account,
        tx=tx,
        client=client,
    )
    tx.add(
        ixs.handle_payment_with_royalties_ix(
            payment_manager=get_payment_manager_addr(name),
            payer_token_account=payer_token_account,
            fee_collector_token_account=fee_collector_token_account,
            payment_token_account=payment_token_account,
            payment_mint=payment_mint,
            mint=mint,
            mint_metadata=get_mint_metadata_addr(mint),
            payer=payer,
            payment_amount=payment_amount,
            remaining_accounts=royalties.to_account_metas(),
        )
    )
    return tx


def with_handle_native_payment_with_royalties(
        tx: TransactionBuilder,
        name: str,
        payment_amount: int,
        mint: Pubkey,
        payer: Pubkey,
        fee_collector: Pubkey,
        payment_target: Pubkey,
        buy_side_receiver: Optional[Pubkey] = None,
        exclude_creators: Iterable[Pubkey] = (),
        client=None,
) -> TransactionBuilder:
    royalties = build_royalty_accounts(
        mint,
        None,
        payer,
        exclude_creators=exclude_creators,
        buy_side_receiver=buy_side_receiver,
        tx=tx,
        client=client,
    )
    tx.add(
        ixs.handle_native_payment_with_royalties_ix(
            payment_manager=get_payment_manager_addr(name),
            fee_collector=fee_collector,
            payment_target=payment_target,
            payer=payer,
            mint=mint,
            mint_metadata=get_mint_metadata_addr(mint),
            payment_amount=payment_amount,
            remaining_accounts=royalties.to_account_metas(),
        )
    )
    return tx
