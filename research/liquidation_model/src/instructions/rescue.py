"""Rescuer registry entry points and the supervised rescue attempt"""
import logging
from typing import Any, Optional
from ..state.engine_config import LiquidationEngineState
from ..interfaces import RescueOutcome
from ..gas_meter import GasMeter
from ..atomic import participants, restore_snapshots, take_snapshots
from .. import events
from ..errors import (
    InvalidRescueOutcome,
    NotAuthorized,
    OutOfGas,
    RescuerNotApproved,
    RescuerRejected,
)
from ..constants import (
    MAX_UINT256,
    PROBE_COLLATERAL_TYPE,
    PROBE_OWNER,
    ZERO_ADDRESS,
)

logger = logging.getLogger(__name__)

def approve_rescuer(state: LiquidationEngineState, candidate: Any, caller: str) -> None:
    """Probe a candidate rescuer and add it to the approved list.

    The probe calls `save_position` with an empty collateral type and the zero
    address as owner; a conforming rescuer answers `(True, MAX_UINT256,
    MAX_UINT256)` without touching real positions. Anything the probe changes
    is rolled back regardless of the outcome, and any failure of the candidate
    is reported as `RescuerRejected`.
    """
    state.authorizations.require(caller)
    address = getattr(candidate, "address", None)
    if not isinstance(address, str) or not address or address == ZERO_ADDRESS:
        raise RescuerRejected("Rescuer has no address")

    snapshots = take_snapshots(participants(state, candidate))
    meter = GasMeter(state.config.rescue_call_budget)
    try:
        with meter.metering():
            outcome = candidate.save_position(state.address, PROBE_COLLATERAL_TYPE, PROBE_OWNER)
        if meter.exhausted:
            raise OutOfGas(f"Gas budget of {meter.budget} exhausted ({meter.used} used)")
        conforming = bool(
            outcome.ok is True
            and outcome.collateral_added_or_debt_repaid == MAX_UINT256
            and outcome.liquidator_reward == MAX_UINT256
        )
    except BaseException as exc:
        raise RescuerRejected(f"Rescuer {address} probe failed: {describe_failure(exc)}") from exc
    finally:
        restore_snapshots(snapshots)

    if not conforming:
        raise RescuerRejected(f"Rescuer {address} returned invalid probe amounts")

    state.rescuers.approve(candidate)
    logger.info("Approved rescuer %s", address)
    state.event_log.emit(events.RescuerApproved(address))

def revoke_rescuer(state: LiquidationEngineState, address: str, caller: str) -> None:
    """Remove a rescuer from the approved list; positions that chose it lose protection"""
    state.authorizations.require(caller)
    state.rescuers.revoke(address)
    logger.info("Revoked rescuer %s", address)
    state.event_log.emit(events.RescuerRevoked(address))

def choose_rescuer(
    state: LiquidationEngineState, collateral_type: str, owner: str, rescuer: str, caller: str
) -> None:
    if not state.ledger.is_authorized_to_modify(owner, caller):
        raise NotAuthorized(f"{caller!r} cannot modify position of {owner!r}")
    if rescuer != ZERO_ADDRESS and not state.rescuers.is_approved(rescuer):
        raise RescuerNotApproved(f"Rescuer {rescuer!r} is not approved")

    state.rescuers.choose(collateral_type, owner, rescuer)
    state.event_log.emit(events.RescuerChosen(collateral_type, owner, rescuer))

def attempt_rescue(
    state: LiquidationEngineState, collateral_type: str, owner: str, liquidator: str
) -> Optional[RescueOutcome]:
    """Give the owner's rescuer one chance to cure the position.

    Runs the rescuer under the rescue gas budget. If it raises anything at
    all, runs out of gas or leaves the position with less collateral or more
    debt than before, every participant is rolled back, a `RescueFailed`
    event is emitted and None is returned. Never raises.
    """
    rescuer = state.rescuers.active_rescuer(collateral_type, owner)
    if rescuer is None:
        return None
    address = state.rescuers.chosen_address(collateral_type, owner)

    before = state.ledger.read_position(collateral_type, owner)
    snapshots = take_snapshots(participants(state, rescuer))
    meter = GasMeter(state.config.rescue_call_budget)
    try:
        with meter.metering():
            outcome = rescuer.save_position(liquidator, collateral_type, owner)
        # a rescuer that swallowed OutOfGas still failed
        if meter.exhausted:
            raise OutOfGas(f"Gas budget of {meter.budget} exhausted ({meter.used} used)")
        after = state.ledger.read_position(collateral_type, owner)
        if after.is_worse_than(before):
            raise InvalidRescueOutcome(
                f"Rescuer {address} worsened position {owner}: {before} -> {after}"
            )
        ok = outcome.ok is True
        amount = int(outcome.collateral_added_or_debt_repaid)
        outcome = RescueOutcome(ok, amount, int(outcome.liquidator_reward))
        if ok and amount > 0:
            logger.info("Rescuer %s saved %s/%s with %s", address, collateral_type, owner, amount)
            state.event_log.emit(events.PositionRescued(collateral_type, owner, amount))
    except BaseException as exc:
        restore_snapshots(snapshots)
        reason = describe_failure(exc)
        logger.warning(
            "Rescue of %s/%s by %s failed after %d gas: %s",
            collateral_type, owner, address, meter.used, reason,
        )
        state.event_log.emit(events.RescueFailed(collateral_type, owner, address, reason))
        return None
    return outcome

def describe_failure(exc: BaseException) -> str:
    """Exception type and message; the message alone is rescuer code and may itself fail"""
    name = type(exc).__name__
    try:
        return f"{name}: {exc}"
    except Exception:
        return name
