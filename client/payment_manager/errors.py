from typing import Optional

from solders.pubkey import Pubkey


class PaymentManagerError(Exception):
    retryable = False


class InvalidBasisPoints(PaymentManagerError, ValueError):
    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"{field} must be within 0..10000 basis points, got {value!r}")


class InvalidCreatorShares(PaymentManagerError, ValueError):
    pass


class InvalidPaymentAmount(PaymentManagerError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"payment amount must be a non-negative integer, got {value!r}")


class MissingAuthority(PaymentManagerError, ValueError):
    def __init__(self, field: str = "authority"):
        self.field = field
        super().__init__(f"{field} is required")


class Unauthorized(PaymentManagerError):
    def __init__(self, signer: Pubkey, expected: Pubkey, action: str):
        self.signer = signer
        self.expected = expected
        super().__init__(f"{signer} may not {action}; expected {expected}")


class AccountNotFound(PaymentManagerError, LookupError):
    def __init__(self, address: Optional[Pubkey], kind: str = "account"):
        self.address = address
        self.kind = kind
        super().__init__(f"{kind} not found: {address}")


class PaymentManagerNotFound(AccountNotFound):
    def __init__(self, address: Pubkey, name: Optional[str] = None):
        self.name = name
        super().__init__(address, kind="payment manager")
        if name is not None:
            self.args = (f"No payment manager found with name {name!r} ({address})",)


class PaymentManagerAlreadyExists(PaymentManagerError):
    def __init__(self, address: Pubkey, name: str):
        self.address = address
        self.name = name
        super().__init__(f"Payment manager {name!r} already exists at {address}")


class AccountDecodeError(PaymentManagerError, ValueError):
    pass


class RetryableRpcError(PaymentManagerError):
    """The RPC node could not be reached or answered with an error.

    Nothing was decided about the request; the caller may retry it.
    """

    retryable = True
