# Fixed point scale factors
WAD = 10**18  # collateral, normalized debt, liquidation penalty
RAY = 10**27  # accumulated rate, liquidation price
RAD = 10**45  # debt floor, auction caps, amounts to raise

# Integer bounds
MAX_UINT256 = 2**256 - 1
MAX_INT256 = 2**255  # largest delta the ledger accepts for confiscation
MAX_LIQUIDATION_QUANTITY = MAX_UINT256 // RAY

# Principals
ZERO_ADDRESS = "0x0"
DEFAULT_ENGINE_ADDRESS = "liquidation_engine"

# Rescuer capability probe: called with an empty collateral type and the zero
# address, a conforming rescuer answers (True, MAX_UINT256, MAX_UINT256)
PROBE_COLLATERAL_TYPE = ""
PROBE_OWNER = ZERO_ADDRESS

# Gas model for the rescue sub-call
DEFAULT_RESCUE_CALL_BUDGET = 1_000_000
READ_GAS_COST = 2_100
WRITE_GAS_COST = 20_000
STEP_GAS_COST = 3  # per Python call or line executed while metered

# Default engine parameters
DEFAULT_ON_AUCTION_SYSTEM_COIN_LIMIT = MAX_UINT256
DEFAULT_LIQUIDATION_PENALTY = WAD  # no markup
DEFAULT_LIQUIDATION_QUANTITY_CAP = MAX_LIQUIDATION_QUANTITY

# Parameter keys
GLOBAL_PARAMETERS = (
    "on_auction_system_coin_limit",
    "accounting_subsystem_reference",
    "rescue_call_budget",
)
COLLATERAL_PARAMETERS = (
    "liquidation_penalty",
    "liquidation_quantity_cap",
    "auction_house_reference",
)
