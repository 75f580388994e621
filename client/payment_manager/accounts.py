import logging
from typing import Optional

from solana.exceptions import SolanaRpcException
from solders.pubkey import Pubkey

from payment_manager import program_ids as pids
from payment_manager.addrs import get_mint_metadata_addr, get_payment_manager_addr
from payment_manager.errors import (
    AccountDecodeError,
    AccountNotFound,
    PaymentManagerNotFound,
    RetryableRpcError,
)
from payment_manager.state import MetadataData, PaymentManager, TokenAccount, default_parser
from payment_manager.utils.solana import Context, fetch_account_details

logger = logging.getLogger(__name__)


def _parse(details):
    parser = Context.get_global_parser()
    if parser is None:
        parser = default_parser()
    return details.parse(parser)


def get_payment_manager(addr: Pubkey, client=None, name: Optional[str] = None) -> PaymentManager:
    details = fetch_account_details(addr, client)
    if not details.exists:
        raise PaymentManagerNotFound(addr, name)
    if details.owner != pids.PAYMENT_MANAGER_PROGRAM_ID:
        raise AccountDecodeError(f"{addr} is owned by {details.owner}, not the payment manager program")
    return _parse(details)


def try_get_payment_manager(addr: Pubkey, client=None) -> Optional[PaymentManager]:
    try:
        return get_payment_manager(addr, client)
    except PaymentManagerNotFound:
        return None


def get_payment_manager_by_name(name: str, client=None) -> PaymentManager:
    return get_payment_manager(get_payment_manager_addr(name), client, name=name)


class MetadataStatus:
    FOUND = "found"
    ABSENT = "absent"
    UNPARSABLE = "unparsable"


def read_creator_metadata(mint: Pubkey, client=None):
    """Reads the token metadata of `mint`.

    Returns `(metadata, status)`. A missing account or data that does not
    decode as token metadata yields `(None, status)` rather than an error;
    RPC failures are raised as `RetryableRpcError`.
    """
    metadata_addr = get_mint_metadata_addr(mint)
    details = fetch_account_details(metadata_addr, client)
    if not details.exists or not details.data:
        return None, MetadataStatus.ABSENT
    if details.owner != pids.TOKEN_METADATA_PROGRAM_ID:
        logger.debug("metadata %s for mint %s is owned by %s", metadata_addr, mint, details.owner)
        return None, MetadataStatus.UNPARSABLE
    try:
        metadata: MetadataData = _parse(details)
    except AccountDecodeError as e:
        logger.debug("metadata %s for mint %s did not decode: %s", metadata_addr, mint, e)
        return None, MetadataStatus.UNPARSABLE
    if metadata.mint != mint:
        logger.debug("metadata %s belongs to mint %s, not %s", metadata_addr, metadata.mint, mint)
        return None, MetadataStatus.UNPARSABLE
    return metadata, MetadataStatus.FOUND


def get_token_account(addr: Pubkey, client=None) -> TokenAccount:
    details = fetch_account_details(addr, client)
    if not details.exists:
        raise AccountNotFound(addr, kind="token account")
    if details.owner != pids.SPL_TOKEN_PROGRAM_ID:
        raise AccountDecodeError(f"{addr} is owned by {details.owner}, not the token program")
    return _parse(details)


def get_largest_token_account(mint: Pubkey, client=None) -> Pubkey:
    if client is None:
        client = Context.get_global_client()

    try:
        resp = client.get_token_largest_accounts(mint)
    except SolanaRpcException as e:
        raise RetryableRpcError(f"Failed to fetch largest accounts of {mint}: {e}") from e
    if not resp.value:
        raise AccountNotFound(mint, kind="token account for mint")
    return resp.value[0].address
