from typing import Iterable, Optional

from solders.pubkey import Pubkey

from payment_manager import transaction as ptx
from payment_manager.transaction import PaymentManagerState
from payment_manager.utils.solana import (
    TransactionBuilder,
    actionify,
)


def _post_init_payment_manager(resp):
    return PaymentManagerState.ACTIVE, resp


def _post_close_payment_manager(resp):
    return PaymentManagerState.CLOSED, resp


@actionify(post_process=_post_init_payment_manager)
def init_payment_manager(
    payer: Pubkey,
    name: str,
    fee_collector: Pubkey,
    maker_fee_basis_points: int,
    taker_fee_basis_points: int,
    include_seller_fee_basis_points: bool = False,
    royalty_fee_share: Optional[int] = None,
    authority: Optional[Pubkey] = None,
):
    tx, _ = ptx.with_init(
        TransactionBuilder(fee_payer=payer),
        name,
        fee_collector=fee_collector,
        maker_fee_basis_points=maker_fee_basis_points,
        taker_fee_basis_points=taker_fee_basis_points,
        include_seller_fee_basis_points=include_seller_fee_basis_points,
        royalty_fee_share=royalty_fee_share,
        authority=authority if authority is not None else payer,
        payer=payer,
    )
    return tx


@actionify
def update_payment_manager(
    payer: Pubkey,
    name: str,
    authority: Optional[Pubkey] = None,
    fee_collector: Optional[Pubkey] = None,
    maker_fee_basis_points: Optional[int] = None,
    taker_fee_basis_points: Optional[int] = None,
    royalty_fee_share: Optional[int] = None,
):
    tx, _ = ptx.with_update(
        TransactionBuilder(fee_payer=payer),
        name,
        signer=payer,
        authority=authority,
        fee_collector=fee_collector,
        maker_fee_basis_points=maker_fee_basis_points,
        taker_fee_basis_points=taker_fee_basis_points,
        royalty_fee_share=royalty_fee_share,
    )
    return tx


@actionify(post_process=_post_close_payment_manager)
def close_payment_manager(
    payer: Pubkey,
    name: str,
    collector: Optional[Pubkey] = None,
):
    return ptx.with_close(TransactionBuilder(fee_payer=payer), name, closer=payer, collector=collector)


@actionify
def handle_native_payment_with_royalties(
    payer: Pubkey,
    name: str,
    payment_amount: int,
    mint: Pubkey,
    fee_collector: Pubkey,
    payment_target: Pubkey,
    buy_side_receiver: Optional[Pubkey] = None,
    exclude_creators: Iterable[Pubkey] = (),
):
    return ptx.with_handle_native_payment_with_royalties(
        TransactionBuilder(fee_payer=payer),
        name,
        payment_amount=payment_amount,
        mint=mint,
        payer=payer,
        fee_collector=fee_collector,
        payment_target=payment_target,
        buy_side_receiver=buy_side_receiver,
        exclude_creators=exclude_creators,
    )


@actionify
def handle_payment_with_royalties(
    payer: Pubkey,
    name: str,
    payment_amount: int,
    mint: Pubkey,
    payment_mint: Pubkey,
    payer_token_account: Pubkey,
    fee_collector_token_account: Pubkey,
    payment_token_account: Pubkey,
    buy_side_token_account: Optional[Pubkey] = None,
    exclude_creators: Iterable[Pubkey] = (),
):
    return ptx.with_handle_payment_with_royalties(
        TransactionBuilder(fee_payer=payer),
        name,
        payment_amount=payment_amount,
        mint=mint,
        payment_mint=payment_mint,
        payer=payer,
        payer_token_account=payer_token_account,
        fee_collector_token_account=fee_collector_token_account,
        payment_token_account=payment_token_account,
        buy_side_token_account=buy_side_token_account,
        exclude_creators=exclude_creators,
    )


@actionify
def manage_payment(
    payer: Pubkey,
    name: str,
    payment_amount: int,
    payer_token_account: Pubkey,
    fee_collector_token_account: Pubkey,
    payment_token_account: Pubkey,
):
    return ptx.with_manage_payment(
        TransactionBuilder(fee_payer=payer),
        name,
        payment_amount=payment_amount,
        payer=payer,
        payer_token_account=payer_token_account,
        fee_collector_token_account=fee_collector_token_account,
        payment_token_account=payment_token_account,
    )
