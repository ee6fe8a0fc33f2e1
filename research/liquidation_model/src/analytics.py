"""Rebuild engine state from its event log with pandas"""
from typing import Iterable

import pandas as pd

from .constants import RAD, WAD
from .events import Event

LIQUIDATION_COLUMNS = [
    "collateral_type", "owner", "collateral_amount", "debt_amount",
    "amount_to_raise", "auction_house", "auction_id",
]

def events_to_frame(events: Iterable[Event]) -> pd.DataFrame:
    """One row per event, in emission order, with a `sequence` column"""
    # object dtype keeps fixed point ints exact, they overflow int64
    frame = pd.DataFrame([event.to_record() for event in events], dtype=object)
    if frame.empty:
        return pd.DataFrame(columns=["sequence", "event"])
    frame.insert(0, "sequence", range(len(frame)))
    return frame

def on_auction_history(frame: pd.DataFrame) -> pd.Series:
    """Running on-auction coin counter after every update, indexed by sequence"""
    if frame.empty or "current_on_auction_system_coins" not in frame:
        return pd.Series(dtype=object, name="current_on_auction_system_coins")
    updates = frame[frame["event"] == "OnAuctionCoinsUpdated"]
    return updates.set_index("sequence")["current_on_auction_system_coins"]

def liquidations(frame: pd.DataFrame) -> pd.DataFrame:
    if frame.empty or "auction_id" not in frame:
        return pd.DataFrame(columns=LIQUIDATION_COLUMNS)
    rows = frame[frame["event"] == "PositionLiquidated"]
    return rows[LIQUIDATION_COLUMNS].reset_index(drop=True)

def liquidation_summary(frame: pd.DataFrame) -> pd.DataFrame:
    """Per collateral type totals in human units (collateral and debt in WAD, raise in RAD)"""
    rows = liquidations(frame)
    if rows.empty:
        return pd.DataFrame(columns=["liquidations", "collateral_seized", "debt_cleared", "amount_to_raise"])
    human = pd.DataFrame({
        "collateral_type": rows["collateral_type"],
        "collateral_seized": [int(v) / WAD for v in rows["collateral_amount"]],
        "debt_cleared": [int(v) / WAD for v in rows["debt_amount"]],
        "amount_to_raise": [int(v) / RAD for v in rows["amount_to_raise"]],
    })
    summary = human.groupby("collateral_type").agg(
        liquidations=("collateral_seized", "size"),
        collateral_seized=("collateral_seized", "sum"),
        debt_cleared=("debt_cleared", "sum"),
        amount_to_raise=("amount_to_raise", "sum"),
    )
    return summary

def rescue_counts(frame: pd.DataFrame) -> pd.Series:
    """How many rescues succeeded and failed"""
    if frame.empty:
        return pd.Series({"PositionRescued": 0, "RescueFailed": 0})
    counts = frame["event"].value_counts()
    return pd.Series({name: int(counts.get(name, 0)) for name in ("PositionRescued", "RescueFailed")})
