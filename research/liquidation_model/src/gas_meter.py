"""Gas accounting for calls into untrusted rescuer code"""
import sys
from contextvars import ContextVar
from typing import Optional

from .constants import STEP_GAS_COST
from .errors import OutOfGas

_active_meter: ContextVar[Optional["GasMeter"]] = ContextVar("active_gas_meter", default=None)

class GasMeter:
    """Counts gas units spent while metering is active.

    Collaborators call `charge_gas` for every state read or write. On top of
    that, every Python call and line executed inside the metered block costs
    `STEP_GAS_COST`, so pure computation draws from the same budget. Once the
    budget is exhausted `OutOfGas` is raised in the running frame.
    """

    def __init__(self, budget: int):
        self.budget = budget
        self.used = 0

    @property
    def remaining(self) -> int:
        return max(0, self.budget - self.used)

    @property
    def exhausted(self) -> bool:
        return self.used > self.budget

    def consume(self, amount: int) -> None:
        self.used += amount
        if self.exhausted:
            raise OutOfGas(f"Gas budget of {self.budget} exhausted ({self.used} used)")

    def metering(self) -> "Metering":
        return Metering(self)

class Metering:
    """Context manager making a meter active and tracing the code run under it"""

    def __init__(self, meter: GasMeter):
        self.meter = meter
        self._token = None
        self._previous_trace = None

    def __enter__(self) -> GasMeter:
        self._token = _active_meter.set(self.meter)
        self._previous_trace = sys.gettrace()
        sys.settrace(_trace_step)
        return self.meter

    def __exit__(self, exc_type, exc, tb) -> None:
        sys.settrace(self._previous_trace)
        _active_meter.reset(self._token)

def _trace_step(frame, event, arg):
    # frames of this module are free so entering and leaving a metered block never runs out of gas
    if frame.f_code.co_filename == __file__:
        return None
    if event in ("call", "line"):
        charge_gas(STEP_GAS_COST)
    return _trace_step

def charge_gas(amount: int) -> None:
    """Charge the active meter, if any"""
    meter = _active_meter.get()
    if meter is not None:
        meter.consume(amount)

def active_meter() -> Optional[GasMeter]:
    return _active_meter.get()
