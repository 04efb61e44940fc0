"""
Avatar Progression

Applies XP and attribute gains to an avatar.

Level-up Rules:
- Level is re-derived from cumulative XP on every gain (see level_curve)
- +2 strength, wisdom and intelligence per level gained
- Every item whose unlock level was crossed is unlocked, even when one gain
  crosses several levels
- Attributes are capped at 999

Attribute Milestones:
- Each time an attribute passes a multiple of 50 it gets a one-time +5 bonus
"""

from typing import Dict, Iterable, List
import logging

from lifexp.exceptions import ValidationError
from lifexp.gamification.level_curve import level_from_total_xp, total_xp_for
from lifexp.models.avatar import MAX_ATTRIBUTE_VALUE, AttributeType, Avatar
from lifexp.models.results import AttributeGainResult, LevelUpResult, XpGainResult

logger = logging.getLogger(__name__)

ATTRIBUTE_POINTS_PER_LEVEL = 2
ATTRIBUTE_MILESTONE_STEP = 50
ATTRIBUTE_MILESTONE_BONUS = 5

LEVEL_UNLOCKS: Dict[int, str] = {
    5: "basic_sword",
    10: "leather_armor",
    15: "magic_staff",
    20: "steel_armor",
    25: "enchanted_cloak",
    30: "dragon_sword",
    40: "mythril_armor",
    50: "legendary_weapon",
}


def _check_amount(amount, field: str) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(f"{field} must be an integer", field=field, value=amount)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative", field=field, value=amount)


def avatar_total_xp(avatar: Avatar) -> int:
    """Cumulative XP an avatar has earned"""
    return total_xp_for(avatar.level, avatar.current_xp)


def calculate_new_unlocks(
    previous_level: int,
    new_level: int,
    already_unlocked: Iterable[str] = (),
) -> List[str]:
    """Items unlocked by levels in (previous_level, new_level], in level order"""
    owned = set(already_unlocked)
    return [
        item_id
        for level, item_id in sorted(LEVEL_UNLOCKS.items())
        if previous_level < level <= new_level and item_id not in owned
    ]


def calculate_attribute_increases(previous_level: int, new_level: int) -> Dict[AttributeType, int]:
    levels_gained = max(0, new_level - previous_level)
    increase = levels_gained * ATTRIBUTE_POINTS_PER_LEVEL
    return {attribute: increase for attribute in AttributeType}


def apply_xp_gain(avatar: Avatar, amount: int) -> XpGainResult:
    """
    Add XP to an avatar and resolve any level-ups

    Args:
        avatar: Current avatar snapshot
        amount: XP to add (0 is a no-op)

    Returns:
        XpGainResult with the replacement avatar. `attribute_increases` holds
        the points actually applied after the 999 cap.

    Raises:
        ValidationError: amount is negative
    """
    _check_amount(amount, "amount")
    if amount == 0:
        return XpGainResult(avatar=avatar, leveled_up=False, levels_gained=0)

    previous_level = avatar.level
    progress = level_from_total_xp(avatar_total_xp(avatar) + amount)
    new_level = progress.level
    levels_gained = new_level - previous_level

    updates = {"level": new_level, "current_xp": progress.xp_into_level}
    applied: Dict[AttributeType, int] = {}
    new_unlocks: List[str] = []

    if levels_gained > 0:
        for attribute, increase in calculate_attribute_increases(previous_level, new_level).items():
            current = avatar.get_attribute(attribute)
            raised = min(current + increase, MAX_ATTRIBUTE_VALUE)
            updates[attribute.value] = raised
            applied[attribute] = raised - current

        new_unlocks = calculate_new_unlocks(previous_level, new_level, avatar.unlocked_items)
        if new_unlocks:
            updates["unlocked_items"] = avatar.unlocked_items | frozenset(new_unlocks)

    updated = avatar.model_copy(update=updates)

    level_up = None
    if levels_gained > 0:
        level_up = LevelUpResult(
            previous_level=previous_level,
            new_level=new_level,
            xp_gained=amount,
            attribute_increases=applied,
            new_unlocks=new_unlocks,
        )
        logger.info(
            f"Avatar {avatar.id} (user {avatar.user_id}) leveled up from "
            f"{previous_level} to {new_level}! Unlocked: {new_unlocks or 'nothing'}"
        )
    else:
        logger.debug(f"Avatar {avatar.id} gained {amount} XP, still level {new_level}")

    return XpGainResult(
        avatar=updated,
        leveled_up=levels_gained > 0,
        levels_gained=levels_gained,
        attribute_increases=applied,
        new_unlocks=new_unlocks,
        level_up=level_up,
    )


def increase_attribute(avatar: Avatar, attribute: AttributeType, amount: int) -> AttributeGainResult:
    """
    Raise one attribute and grant milestone bonuses

    Each multiple of 50 in (previous_value, raised_value] adds +5 once. The
    bonus points themselves never trigger another milestone, and calling this
    again at an unchanged value crosses nothing, so nothing is granted twice.

    Raises:
        ValidationError: amount is negative
    """
    _check_amount(amount, "amount")
    attribute = AttributeType(attribute)

    previous_value = avatar.get_attribute(attribute)
    raised = min(previous_value + amount, MAX_ATTRIBUTE_VALUE)
    milestones_crossed = raised // ATTRIBUTE_MILESTONE_STEP - previous_value // ATTRIBUTE_MILESTONE_STEP
    new_value = min(raised + milestones_crossed * ATTRIBUTE_MILESTONE_BONUS, MAX_ATTRIBUTE_VALUE)
    milestone_bonus = new_value - raised

    if milestones_crossed:
        logger.info(
            f"Avatar {avatar.id} {attribute.value} passed a milestone "
            f"({previous_value} → {raised}), bonus +{milestone_bonus}"
        )

    updated = avatar if new_value == previous_value else avatar.model_copy(
        update={attribute.value: new_value}
    )

    return AttributeGainResult(
        avatar=updated,
        attribute=attribute,
        previous_value=previous_value,
        new_value=new_value,
        milestone_bonus=milestone_bonus,
    )


def unlock_item(avatar: Avatar, item_id: str) -> Avatar:
    """Add an item to the avatar's unlocked set (no-op if already owned)"""
    if not item_id:
        raise ValidationError("Item id cannot be empty", field="item_id", value=item_id)
    if avatar.has_unlocked_item(item_id):
        return avatar
    return avatar.model_copy(update={"unlocked_items": avatar.unlocked_items | {item_id}})
