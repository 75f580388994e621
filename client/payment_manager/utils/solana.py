import logging
import threading
from functools import wraps
from hashlib import sha256
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from payment_manager.errors import AccountNotFound, RetryableRpcError

logger = logging.getLogger(__name__)


class Context:
    client: Optional[Client] = None
    parser: Optional["AccountParser"] = None
    signers: Dict[bytes, Tuple[Keypair, str]] = {}
    fee_payer: Optional[Keypair] = None
    raise_on_error = False

    @staticmethod
    def init_globals(
            fee_payer: Keypair,
            client: Client,
            signers: Iterable[Tuple[Keypair, str]],
            parser: Optional["AccountParser"] = None,
            raise_on_error=False,
    ):
        Context.fee_payer = fee_payer
        Context.client = client
        Context.parser = parser
        Context.signers = {}
        Context.raise_on_error = raise_on_error
        Context.add_signers(*signers)

    @staticmethod
    def get_global_client():
        return Context.client

    @staticmethod
    def set_global_client(client):
        Context.client = client

    @staticmethod
    def get_global_parser():
        return Context.parser

    @staticmethod
    def set_global_parser(parser):
        Context.parser = parser

    @staticmethod
    def get_signers():
        return Context.signers

    @staticmethod
    def add_signers(*signers: Tuple[Keypair, str], verify=True):
        for (signer, name) in signers:
            if not isinstance(signer, Keypair) or not isinstance(name, str):
                raise ValueError(f"signers must be a list iterable of (Keypair, str) tuples. Found: {signer, name}")
            if bytes(signer.pubkey()) not in Context.signers:
                Context.signers[bytes(signer.pubkey())] = (signer, name)
        if verify:
            names = set()
            for (_, name) in Context.signers.values():
                if name in names:
                    raise ValueError("Each signer name must be unique")
                names.add(name)

    @staticmethod
    def get_global_fee_payer():
        return Context.fee_payer

    @staticmethod
    def set_global_fee_payer(fee_payer: Keypair):
        Context.fee_payer = fee_payer

    @staticmethod
    def get_raise_on_error():
        return Context.raise_on_error

    @staticmethod
    def set_raise_on_error(raise_on_error: bool):
        Context.raise_on_error = raise_on_error


class AccountParser:
    _parsers: Dict[bytes, Callable]  # key: program_id

    def __init__(self):
        self._parsers = dict()

    def register_parser(self, program_id: Pubkey, parser):
        self._parsers[bytes(program_id)] = parser

    def parse(self, account):
        try:
            parser = self._parsers[bytes(account.owner)]
        except KeyError:
            raise ValueError(f"Failed to find parser corresponding to account owner. Owner={account.owner}",
                             [str(Pubkey.from_bytes(p)) for p in self._parsers.keys()])
        return parser(bytes(account.data))


class TransactionBuilder:
    """Ordered, caller-owned buffer of instructions for one transaction.

    `add` may be called from several threads; appends are serialized so the
    instruction order is always the order in which `add` calls completed.
    `claim` lets concurrent callers agree on which of them appends the
    instruction for a given key.
    """

    def __init__(self, fee_payer: Optional[Pubkey] = None):
        self.fee_payer = fee_payer
        self._instructions: List[Instruction] = []
        self._claims = set()
        self._lock = threading.Lock()

    def add(self, *items: Union[Instruction, "TransactionBuilder"]) -> "TransactionBuilder":
        with self._lock:
            for item in items:
                if isinstance(item, TransactionBuilder):
                    self._instructions.extend(item.instructions)
                    if self.fee_payer is None:
                        self.fee_payer = item.fee_payer
                elif isinstance(item, Instruction):
                    self._instructions.append(item)
                else:
                    raise ValueError(f"Cannot add {type(item).__name__} to a transaction")
        return self

    @property
    def instructions(self) -> List[Instruction]:
        with self._lock:
            return list(self._instructions)

    def claim(self, key, pending: Optional[Callable[[List[Instruction]], bool]] = None) -> bool:
        """Reserves `key` for the caller.

        Returns False when `key` was claimed before or when `pending` finds
        it among the instructions already added.
        """
        with self._lock:
            if key in self._claims:
                return False
            if pending is not None and pending(self._instructions):
                return False
            self._claims.add(key)
            return True

    def release(self, key):
        with self._lock:
            self._claims.discard(key)

    def __len__(self):
        with self._lock:
            return len(self._instructions)

    def signer_keys(self) -> List[Pubkey]:
        keys = []
        if self.fee_payer is not None:
            keys.append(self.fee_payer)
        for ix in self.instructions:
            for meta in ix.accounts:
                if meta.is_signer and meta.pubkey not in keys:
                    keys.append(meta.pubkey)
        return keys

    def to_message(self) -> Message:
        return Message(self.instructions, self.fee_payer)


class AccountDetails:
    def __init__(self, public_key: Pubkey, account):
        self.public_key = public_key
        self.account = account

    def __str__(self) -> str:
        return f"AccountDetails({self.public_key})"

    def __repr__(self) -> str:
        return str(self)

    @property
    def exists(self) -> bool:
        return self.account is not None

    @property
    def owner(self) -> Optional[Pubkey]:
        if not self.account:
            return None
        return self.account.owner

    @property
    def data(self) -> Optional[bytes]:
        if not self.account:
            return None
        return bytes(self.account.data)

    def parse(self, parser: Optional["AccountParser"] = None):
        if not self.account:
            raise AccountNotFound(self.public_key)
        if parser is None:
            parser = Context.get_global_parser()
        return parser.parse(self.account)


def fetch_account_details(addr: Pubkey, client=None) -> AccountDetails:
    if client is None:
        client = Context.get_global_client()

    try:
        resp = client.get_account_info(addr, commitment=Confirmed)
    except SolanaRpcException as e:
        raise RetryableRpcError(f"Failed to fetch account {addr}: {e}") from e
    return AccountDetails(addr, resp.value)


def account_exists(addr: Pubkey, client=None) -> bool:
    return fetch_account_details(addr, client).exists


def send_instructions(
        *ixs: Instruction,
        **kwargs
):
    return send_transaction(TransactionBuilder().add(*ixs), **kwargs)


def send_transaction(
        tx: TransactionBuilder,
        *signers: Keypair,
        opts=TxOpts(
            skip_preflight=True,
            skip_confirmation=False,
            preflight_commitment=Confirmed,
        ),
        recent_blockhash=None,
        client=None,
        raise_on_error=None,
):
    if fee_payer := Context.get_global_fee_payer():
        tx = TransactionBuilder(fee_payer=fee_payer.pubkey()).add(tx)

    raise_on_error = raise_on_error if raise_on_error is not None else Context.get_raise_on_error()

    if len(signers) == 0:
        signers = Context.get_signers()
    else:
        signers = {bytes(signer.pubkey()): (signer, f"arg  {i}") for i, signer in enumerate(signers)}

    if client is None:
        client = Context.get_global_client()

    if tx.fee_payer is None:
        raise ValueError("Transaction has no fee payer")

    # only the keypairs the message needs, otherwise signing fails
    signer_keypairs = []
    for pk in tx.signer_keys():
        if bytes(pk) not in signers:
            names = [(name, str(Pubkey.from_bytes(p))) for p, (_, name) in signers.items()]
            raise ValueError(f"Required signer Pubkey not in list of Keypairs. Have {names}, want: {pk}")
        signer_keypairs.append(signers[bytes(pk)][0])

    if recent_blockhash is None:
        recent_blockhash = client.get_latest_blockhash(Confirmed).value.blockhash

    signed = Transaction(signer_keypairs, tx.to_message(), recent_blockhash)
    try:
        signature = client.send_raw_transaction(bytes(signed), opts=opts).value
    except SolanaRpcException as e:
        raise RetryableRpcError(f"Failed to send transaction: {e}") from e
    logger.debug("sent transaction %s with %d instructions", signature, len(tx))

    if raise_on_error:
        status = client.get_signature_statuses([signature]).value[0]
        if status is not None and status.err is not None:
            raise ValueError(f"Transaction {signature} returned error:\n{status.err}")

    return signature


def actionify(func=None, /, post_process=lambda resp: (None, resp), raise_error=False):
    assert not raise_error, "Raise_error is not implemented"

    def _actionify(make):
        @wraps(make)
        def send(*args, **kwargs):
            tx = make(*args, **kwargs)
            if tx is None:
                return post_process(None)
            if isinstance(tx, Instruction):
                tx = TransactionBuilder().add(tx)

            response = send_transaction(tx)
            return post_process(response)

        send.make = make
        return send

    if func is None:
        return _actionify
    return _actionify(func)


def to_account_meta(pubkey: Pubkey, is_signer: bool = False, is_writable: bool = False) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=is_signer, is_writable=is_writable)


def sighash(ix_name: str) -> bytes:
    """Not technically sighash, since we don't include the arguments.
    (Because Rust doesn't allow function overloading.)
    Args:
        ix_name: The instruction name.
    Returns:
        The sighash bytes.
    """
    formatted_str = f"global:{ix_name}"
    return sha256(formatted_str.encode()).digest()[:8]


def account_discriminator(account_name: str) -> bytes:
    return sha256(f"account:{account_name}".encode()).digest()[:8]
