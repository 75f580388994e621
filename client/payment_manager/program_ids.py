import os

import solders.system_program
import spl.token.constants
from solders.pubkey import Pubkey

SYSTEM_PROGRAM_ID = solders.system_program.ID
SPL_TOKEN_PROGRAM_ID = spl.token.constants.TOKEN_PROGRAM_ID
ASSOCIATED_TOKEN_PROGRAM_ID = spl.token.constants.ASSOCIATED_TOKEN_PROGRAM_ID

PAYMENT_MANAGER_PROGRAM_ID = Pubkey.from_string(
    os.environ.get("PAYMENT_MANAGER", "pmvYY6Wgvpe3DEj3UX1FcRpMx43sMLYLJrFTVGcqpdn")
)
TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string(
    os.environ.get("TOKEN_METADATA", "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
)

# permissionless identity allowed to close payment managers
CRANK_KEY = Pubkey.from_string("crkdpVWjHWdggGgBuSyAqSmZUmAjYLzD435tcLDRLXr")

# payments in this "mint" are lamport transfers
NATIVE_PAYMENT_MINT = Pubkey.default()
