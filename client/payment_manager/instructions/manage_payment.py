from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from payment_manager.program_ids import PAYMENT_MANAGER_PROGRAM_ID, SPL_TOKEN_PROGRAM_ID
from .common import InstructionCode, payment_amount_layout


def manage_payment_ix(
    payment_manager: Pubkey,
    payer_token_account: Pubkey,
    fee_collector_token_account: Pubkey,
    payment_token_account: Pubkey,
    payer: Pubkey,
    payment_amount: int,
    program_id: Pubkey = PAYMENT_MANAGER_PROGRAM_ID,
) -> Instruction:
    keys = [
        AccountMeta(pubkey=payment_manager, is_signer=False, is_writable=False),
        AccountMeta(pubkey=payer_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=fee_collector_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payment_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SPL_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    data = InstructionCode.MANAGE_PAYMENT + payment_amount_layout.build({"payment_amount": payment_amount})
    return Instruction(program_id, data, keys)
