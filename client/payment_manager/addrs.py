from typing import Optional, Tuple

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from payment_manager import program_ids as pids

PAYMENT_MANAGER_SEED = b"payment-manager"
METADATA_SEED = b"metadata"
DEFAULT_PAYMENT_MANAGER_NAME = "foobar"


def find_payment_manager_addr(
        name: str,
        program_id: Pubkey = pids.PAYMENT_MANAGER_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    return Pubkey.find_program_address(
        [PAYMENT_MANAGER_SEED, name.encode("utf-8")],
        program_id,
    )


def get_payment_manager_addr(
        name: str,
        program_id: Pubkey = pids.PAYMENT_MANAGER_PROGRAM_ID,
) -> Pubkey:
    return find_payment_manager_addr(name, program_id)[0]


def get_mint_metadata_addr(
        mint: Pubkey,
        program_id: Pubkey = pids.TOKEN_METADATA_PROGRAM_ID,
) -> Pubkey:
    key, _ = Pubkey.find_program_address(
        seeds=[
            METADATA_SEED,
            bytes(program_id),
            bytes(mint),
        ],
        program_id=program_id,
    )
    return key


def is_native_currency(payment_mint: Optional[Pubkey]) -> bool:
    return payment_mint is None or payment_mint == pids.NATIVE_PAYMENT_MINT


def get_destination_addr(payment_mint: Optional[Pubkey], owner: Pubkey) -> Pubkey:
    """Address that receives `owner`'s cut of a payment in `payment_mint`.

    Lamports are paid straight to the owner's wallet; tokens go to the
    owner's associated token account for the payment mint.
    """
    if is_native_currency(payment_mint):
        return owner
    return get_associated_token_address(owner, payment_mint)
