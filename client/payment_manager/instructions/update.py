from typing import Optional

import borsh_construct as borsh
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from payment_manager.program_ids import PAYMENT_MANAGER_PROGRAM_ID, SYSTEM_PROGRAM_ID
from payment_manager.state.common import PUBKEY
from .common import InstructionCode

layout = borsh.CStruct(
    "authority" / PUBKEY,
    "fee_collector" / PUBKEY,
    "maker_fee_basis_points" / borsh.U16,
    "taker_fee_basis_points" / borsh.U16,
    "royalty_fee_share" / borsh.Option(borsh.U64),
)


def update_ix(
    payment_manager: Pubkey,
    payer: Pubkey,
    authority: Pubkey,
    fee_collector: Pubkey,
    maker_fee_basis_points: int,
    taker_fee_basis_points: int,
    royalty_fee_share: Optional[int] = None,
    program_id: Pubkey = PAYMENT_MANAGER_PROGRAM_ID,
) -> Instruction:
    keys = [
        AccountMeta(pubkey=payment_manager, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    data = InstructionCode.UPDATE + layout.build(
        {
            "authority": bytes(authority),
            "fee_collector": bytes(fee_collector),
            "maker_fee_basis_points": maker_fee_basis_points,
            "taker_fee_basis_points": taker_fee_basis_points,
            "royalty_fee_share": royalty_fee_share,
        }
    )
    return Instruction(program_id, data, keys)
