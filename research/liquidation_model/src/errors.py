"""Custom errors for the liquidation engine model"""

class ProtocolError(Exception):
    """Base error class for protocol errors"""
    pass

class ArithmeticOverflowError(ProtocolError):
    """Error for arithmetic overflow/underflow or division by zero"""
    pass

# Caller errors: reported immediately, nothing mutated

class CallerError(ProtocolError):
    """Base class for errors caused by who is calling or with what arguments"""
    pass

class NotAuthorized(CallerError):
    """Caller lacks the permission the entry point requires"""
    pass

class RescuerNotApproved(CallerError):
    """Chosen rescuer is not on the approved list"""
    pass

class RescuerRejected(CallerError):
    """Candidate rescuer failed the capability probe"""
    pass

class UnrecognizedParameter(CallerError):
    """Parameter key is not one the engine knows"""
    pass

class InvalidParameterValue(CallerError):
    """Parameter value failed validation"""
    pass

class AlreadyInitialized(CallerError):
    """Collateral type is already registered"""
    pass

class UnknownCollateralType(CallerError):
    """Collateral type was never registered with the engine"""
    pass

class ContractDisabled(CallerError):
    """Engine has been disabled"""
    pass

class ReentrancyError(CallerError):
    """A guarded entry point was entered while another one was running"""
    pass

# Economic precondition errors: nothing mutated, retry later

class EconomicPreconditionError(ProtocolError):
    """Base class for liquidation preconditions that do not hold right now"""
    pass

class PositionNotUnsafe(EconomicPreconditionError):
    """Position is safe, or its liquidation price is zero"""
    pass

class LiquidationLimitReached(EconomicPreconditionError):
    """Global on-auction limit leaves no room for a viable auction"""
    pass

class ZeroSizedLiquidation(EconomicPreconditionError):
    """Limit adjusted debt rounded down to zero"""
    pass

class ZeroCollateralToSell(EconomicPreconditionError):
    """Proportional collateral seizure rounded down to zero"""
    pass

class DustyRemainder(EconomicPreconditionError):
    """Partial liquidation would leave debt below the debt floor"""
    pass

# Rescue errors: fatal to the rescue attempt only

class RescueError(ProtocolError):
    """Base class for failures inside the rescue sub-call"""
    pass

class InvalidRescueOutcome(RescueError):
    """Rescuer removed collateral or added debt"""
    pass

class OutOfGas(RescueError):
    """Rescue sub-call exhausted its gas budget"""
    pass

# Ledger errors raised by the simulated collaborators

class InvalidPositionError(ProtocolError):
    """Error for invalid position operations"""
    pass

class AuctionNotFound(ProtocolError):
    """Auction id is unknown or already settled"""
    pass
