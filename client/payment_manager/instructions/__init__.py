from .common import (
    InstructionCode,
)

from .close import (
    close_ix,
)

from .handle_native_payment_with_royalties import (
    handle_native_payment_with_royalties_ix,
)

from .handle_payment_with_royalties import (
    handle_payment_with_royalties_ix,
)

from .init import (
    init_ix,
)

from .manage_payment import (
    manage_payment_ix,
)

from .update import (
    update_ix,
)

__all__ = [
    "InstructionCode",
    "close_ix",
    "handle_native_payment_with_royalties_ix",
    "handle_payment_with_royalties_ix",
    "init_ix",
    "manage_payment_ix",
    "update_ix",
]
