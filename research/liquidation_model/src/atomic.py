"""All-or-nothing execution across the engine and its collaborators"""
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Tuple
from .interfaces import Transactional

def participants(state, *extra: Any) -> List[Any]:
    """Every object a liquidation may mutate that knows how to roll itself back"""
    candidates = [state, state.event_log, state.ledger, state.config.accounting_subsystem_reference]
    candidates.extend(params.auction_house_reference for params in state.collateral_types.values())
    candidates.extend(extra)

    seen = set()
    tracked = []
    for candidate in candidates:
        if id(candidate) in seen or not isinstance(candidate, Transactional):
            continue
        seen.add(id(candidate))
        tracked.append(candidate)
    return tracked

def take_snapshots(objects: Iterable[Any]) -> List[Tuple[Any, Any]]:
    return [(obj, obj.snapshot()) for obj in objects]

def restore_snapshots(snapshots: List[Tuple[Any, Any]]) -> None:
    for obj, snapshot in reversed(snapshots):
        obj.restore(snapshot)

@contextmanager
def atomic(objects: Iterable[Any]) -> Iterator[None]:
    """Restore every object to its state on entry if the block raises"""
    snapshots = take_snapshots(objects)
    try:
        yield
    except BaseException:
        restore_snapshots(snapshots)
        raise
