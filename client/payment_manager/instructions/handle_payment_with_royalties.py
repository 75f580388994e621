from typing import List, Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from payment_manager.program_ids import PAYMENT_MANAGER_PROGRAM_ID, SPL_TOKEN_PROGRAM_ID
from .common import InstructionCode, payment_amount_layout


def handle_payment_with_royalties_ix(
    payment_manager: Pubkey,
    payer_token_account: Pubkey,
    fee_collector_token_account: Pubkey,
    payment_token_account: Pubkey,
    payment_mint: Pubkey,
    mint: Pubkey,
    mint_metadata: Pubkey,
    payer: Pubkey,
    payment_amount: int,
    remaining_accounts: Optional[List[AccountMeta]] = None,
    program_id: Pubkey = PAYMENT_MANAGER_PROGRAM_ID,
) -> Instruction:
    keys = [
        AccountMeta(pubkey=payment_manager, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payer_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=fee_collector_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payment_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payment_mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint_metadata, is_signer=False, is_writable=False),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SPL_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    # creators first, buy side receiver last; the program pays them by position
    if remaining_accounts is not None:
        keys += remaining_accounts
    data = InstructionCode.HANDLE_PAYMENT_WITH_ROYALTIES + payment_amount_layout.build(
        {"payment_amount": payment_amount}
    )
    return Instruction(program_id, data, keys)
