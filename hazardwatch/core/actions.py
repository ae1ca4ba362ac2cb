"""
Action classification for hazardwatch.

This module maps the free-text action prescribed by a warning
(e.g. "Shelter In Place Now", "Leave Immediately") onto a priority tier
using an ordered rule list evaluated top-down.
"""

from typing import Literal, Optional, Tuple

ActionTier = Literal["shelter", "leave_immediately", "leave"]

# 우선순위 높은 규칙부터 평가 (첫 일치가 우선)
ACTION_RULES: Tuple[Tuple[str, ActionTier, int], ...] = (
    ("shelter", "shelter", 3),
    ("leave immediately", "leave_immediately", 2),
    ("leave", "leave", 1),
)

def _match(action: Optional[str]) -> Optional[Tuple[str, ActionTier, int]]:
    if not action:
        return None
    normalized = action.lower()
    for phrase, tier, priority in ACTION_RULES:
        if phrase in normalized:
            return (phrase, tier, priority)
    return None

def action_priority(action: Optional[str]) -> int:
    """
    행동 문구의 우선순위를 반환합니다.

    Args:
        action: 경보의 행동 문구 (대소문자 무관)

    Returns:
        shelter=3, leave immediately=2, leave=1, 그 외 0
    """
    rule = _match(action)
    return rule[2] if rule else 0

def action_tier(action: Optional[str]) -> Optional[ActionTier]:
    """행동 문구의 면적 집계 등급을 반환합니다. 해당 없으면 None."""
    rule = _match(action)
    return rule[1] if rule else None

def is_actionable(action: Optional[str]) -> bool:
    """대피/피난 행동이 지시된 문구인지 확인합니다."""
    return action_priority(action) > 0
