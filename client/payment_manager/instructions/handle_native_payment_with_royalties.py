from typing import List, Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from payment_manager.program_ids import PAYMENT_MANAGER_PROGRAM_ID, SYSTEM_PROGRAM_ID
from .common import InstructionCode, payment_amount_layout


def handle_native_payment_with_royalties_ix(
    payment_manager: Pubkey,
    fee_collector: Pubkey,
    payment_target: Pubkey,
    payer: Pubkey,
    mint: Pubkey,
    mint_metadata: Pubkey,
    payment_amount: int,
    remaining_accounts: Optional[List[AccountMeta]] = None,
    program_id: Pubkey = PAYMENT_MANAGER_PROGRAM_ID,
) -> Instruction:
    keys = [
        AccountMeta(pubkey=payment_manager, is_signer=False, is_writable=True),
        AccountMeta(pubkey=fee_collector, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payment_target, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint_metadata, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    if remaining_accounts is not None:
        keys += remaining_accounts
    data = InstructionCode.HANDLE_NATIVE_PAYMENT_WITH_ROYALTIES + payment_amount_layout.build(
        {"payment_amount": payment_amount}
    )
    return Instruction(program_id, data, keys)
