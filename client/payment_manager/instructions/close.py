from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from payment_manager.program_ids import PAYMENT_MANAGER_PROGRAM_ID
from .common import InstructionCode


def close_ix(
    payment_manager: Pubkey,
    collector: Pubkey,
    closer: Pubkey,
    program_id: Pubkey = PAYMENT_MANAGER_PROGRAM_ID,
) -> Instruction:
    keys = [
        AccountMeta(pubkey=payment_manager, is_signer=False, is_writable=True),
        AccountMeta(pubkey=collector, is_signer=False, is_writable=True),
        AccountMeta(pubkey=closer, is_signer=True, is_writable=True),
    ]
    return Instruction(program_id, InstructionCode.CLOSE, keys)
