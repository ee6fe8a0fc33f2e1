"""Events emitted by the liquidation engine, enough to rebuild its state off-chain"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

@dataclass(frozen=True)
class Event:
    @property
    def name(self) -> str:
        return type(self).__name__

    def to_record(self) -> Dict[str, Any]:
        record = {"event": self.name}
        record.update(asdict(self))
        return record

@dataclass(frozen=True)
class AuthorizationAdded(Event):
    account: str

@dataclass(frozen=True)
class AuthorizationRemoved(Event):
    account: str

@dataclass(frozen=True)
class EngineDisabled(Event):
    pass

@dataclass(frozen=True)
class CollateralTypeInitialized(Event):
    collateral_type: str
    auction_house: str
    liquidation_penalty: int
    liquidation_quantity_cap: int

@dataclass(frozen=True)
class ParameterModified(Event):
    parameter: str
    value: Any
    collateral_type: Optional[str] = None

@dataclass(frozen=True)
class RescuerApproved(Event):
    rescuer: str

@dataclass(frozen=True)
class RescuerRevoked(Event):
    rescuer: str

@dataclass(frozen=True)
class RescuerChosen(Event):
    collateral_type: str
    owner: str
    rescuer: str

@dataclass(frozen=True)
class PositionRescued(Event):
    collateral_type: str
    owner: str
    collateral_added_or_debt_repaid: int

@dataclass(frozen=True)
class RescueFailed(Event):
    collateral_type: str
    owner: str
    rescuer: str
    reason: str

@dataclass(frozen=True)
class OnAuctionCoinsUpdated(Event):
    current_on_auction_system_coins: int

@dataclass(frozen=True)
class PositionLiquidated(Event):
    collateral_type: str
    owner: str
    collateral_amount: int  # WAD
    debt_amount: int  # WAD
    amount_to_raise: int  # RAD
    auction_house: str
    auction_id: int

class EventLog:
    """Append-only list of events with a couple of lookups"""

    def __init__(self):
        self._events: List[Event] = []

    def emit(self, event: Event) -> None:
        logger.debug("event %s %s", event.name, asdict(event))
        self._events.append(event)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [e for e in self._events if isinstance(e, event_type)]

    def last(self, event_type: Type[E]) -> Optional[E]:
        matching = self.of_type(event_type)
        return matching[-1] if matching else None

    def snapshot(self) -> int:
        return len(self._events)

    def restore(self, snapshot: int) -> None:
        del self._events[snapshot:]
