"""Reward vouchers shown after a lesson quiz is passed."""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter

from .api_models import RewardPayload

router = APIRouter(prefix="/api/rewards", tags=["rewards"])

DEFAULT_REWARD_ID = "1"

REWARD_CATALOG: Dict[str, Dict[str, str]] = {
    "1": {"percentage": "10%", "item": "FERTILIZER PURCHASE"},
    "2": {"percentage": "20%", "item": "COMPOSTING TOOLS"},
}


def lookup_reward(reward_id: str) -> RewardPayload:
    """Unknown ids get the default voucher."""
    key = reward_id if reward_id in REWARD_CATALOG else DEFAULT_REWARD_ID
    return RewardPayload(reward_id=key, **REWARD_CATALOG[key])


@router.get("/{reward_id}", response_model=RewardPayload)
def get_reward(reward_id: str) -> RewardPayload:
    return lookup_reward(reward_id)


__all__ = ["REWARD_CATALOG", "lookup_reward", "router"]
