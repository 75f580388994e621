import borsh_construct as borsh

from payment_manager.utils.solana import sighash


class InstructionCode:
    INIT = sighash("init")
    UPDATE = sighash("update")
    CLOSE = sighash("close")
    MANAGE_PAYMENT = sighash("manage_payment")
    HANDLE_PAYMENT_WITH_ROYALTIES = sighash("handle_payment_with_royalties")
    HANDLE_NATIVE_PAYMENT_WITH_ROYALTIES = sighash("handle_native_payment_with_royalties")


payment_amount_layout = borsh.CStruct(
    "payment_amount" / borsh.U64,
)
