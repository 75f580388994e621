"""In-memory ledger for exercising the client without an RPC node."""
import time
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
from solana.exceptions import SolanaRpcException
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

import payment_manager.instructions.init as init_instruction
import payment_manager.instructions.update as update_instruction
from payment_manager import program_ids as pids
from payment_manager.addrs import find_payment_manager_addr, get_mint_metadata_addr
from payment_manager.instructions import InstructionCode
from payment_manager.state import Creator, MetadataData, PaymentManager, default_parser
from payment_manager.state.token_account import TOKEN_ACCOUNT_LEN
from payment_manager.utils.solana import Context


def token_account_data(mint: Pubkey, owner: Pubkey, amount: int = 0) -> bytes:
    data = bytes(mint) + bytes(owner) + amount.to_bytes(8, "little")
    return data + bytes(TOKEN_ACCOUNT_LEN - len(data))


class FakePaymentManagerProgram:
    """Applies payment manager and associated token account instructions to a FakeClient."""

    def __init__(self, client: "FakeClient"):
        self.client = client

    def execute(self, program_id: Pubkey, data: bytes, accounts: List[Pubkey]):
        if program_id == pids.ASSOCIATED_TOKEN_PROGRAM_ID:
            _, address, owner, mint = accounts[:4]
            self.client.set_account(address, pids.SPL_TOKEN_PROGRAM_ID, token_account_data(mint, owner))
            return
        if program_id != pids.PAYMENT_MANAGER_PROGRAM_ID:
            return

        code, args = data[:8], data[8:]
        if code == InstructionCode.INIT:
            parsed = init_instruction.layout.parse(args)
            _, bump = find_payment_manager_addr(parsed.name)
            record = PaymentManager(
                bump=bump,
                name=parsed.name,
                authority=accounts[1],
                fee_collector=Pubkey.from_bytes(parsed.fee_collector),
                maker_fee_basis_points=parsed.maker_fee_basis_points,
                taker_fee_basis_points=parsed.taker_fee_basis_points,
                include_seller_fee_basis_points=parsed.include_seller_fee_basis_points,
                royalty_fee_share=parsed.royalty_fee_share,
            )
            self.client.set_account(accounts[0], pids.PAYMENT_MANAGER_PROGRAM_ID, record.to_bytes())
        elif code == InstructionCode.UPDATE:
            parsed = update_instruction.layout.parse(args)
            record = PaymentManager.from_bytes(self.client.accounts[accounts[0]].data)
            record.authority = Pubkey.from_bytes(parsed.authority)
            record.fee_collector = Pubkey.from_bytes(parsed.fee_collector)
            record.maker_fee_basis_points = parsed.maker_fee_basis_points
            record.taker_fee_basis_points = parsed.taker_fee_basis_points
            record.royalty_fee_share = parsed.royalty_fee_share
            self.client.set_account(accounts[0], pids.PAYMENT_MANAGER_PROGRAM_ID, record.to_bytes())
        elif code == InstructionCode.CLOSE:
            self.client.accounts.pop(accounts[0], None)


class FakeClient:
    def __init__(self):
        self.accounts: Dict[Pubkey, SimpleNamespace] = {}
        self.largest_accounts: Dict[Pubkey, List[Pubkey]] = {}
        self.sent: List[Transaction] = []
        self.fail_reads = False
        self.read_delay = 0.0
        self.on_read = None
        self.program = FakePaymentManagerProgram(self)

    def set_account(self, address: Pubkey, owner: Pubkey, data: bytes, lamports: int = 1_000_000):
        self.accounts[address] = SimpleNamespace(owner=owner, data=data, lamports=lamports)

    def get_account_info(self, address: Pubkey, commitment=None):
        if self.fail_reads:
            raise SolanaRpcException(ConnectionError("node unreachable"), self.get_account_info, self, address)
        if self.read_delay:
            time.sleep(self.read_delay)
        if self.on_read is not None:
            self.on_read(address)
        return SimpleNamespace(value=self.accounts.get(address))

    def get_token_largest_accounts(self, mint: Pubkey, commitment=None):
        if self.fail_reads:
            raise SolanaRpcException(ConnectionError("node unreachable"), self.get_token_largest_accounts, self, mint)
        return SimpleNamespace(
            value=[SimpleNamespace(address=addr) for addr in self.largest_accounts.get(mint, [])]
        )

    def get_latest_blockhash(self, commitment=None):
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.default()))

    def send_raw_transaction(self, raw: bytes, opts=None):
        tx = Transaction.from_bytes(raw)
        self.sent.append(tx)
        keys = tx.message.account_keys
        for ix in tx.message.instructions:
            self.program.execute(
                keys[ix.program_id_index],
                bytes(ix.data),
                [keys[i] for i in bytes(ix.accounts)],
            )
        return SimpleNamespace(value=tx.signatures[0])

    def get_signature_statuses(self, signatures: List[Signature], search_transaction_history=False):
        return SimpleNamespace(value=[None for _ in signatures])


def put_metadata(
        client: FakeClient,
        mint: Pubkey,
        creators: List[Creator],
        seller_fee_basis_points: int = 100,
        update_authority: Optional[Pubkey] = None,
) -> MetadataData:
    metadata = MetadataData(
        update_authority=update_authority if update_authority is not None else Pubkey.new_unique(),
        mint=mint,
        name="Receipt",
        symbol="RCPT",
        uri="https://example.com/receipt.json",
        seller_fee_basis_points=seller_fee_basis_points,
        creators=creators,
    )
    client.set_account(get_mint_metadata_addr(mint), pids.TOKEN_METADATA_PROGRAM_ID, metadata.to_bytes())
    return metadata


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def payer():
    return Keypair()


@pytest.fixture(autouse=True)
def context(client, payer):
    Context.init_globals(
        fee_payer=payer,
        client=client,
        signers=[(payer, "payer")],
        parser=default_parser(),
        raise_on_error=True,
    )
    yield Context
    Context.init_globals(fee_payer=None, client=None, signers=[], parser=None)
