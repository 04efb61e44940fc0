"""Unit tests for avatar progression (lifexp/gamification/avatar_progression.py)"""
import pytest

from lifexp.exceptions import ValidationError
from lifexp.gamification.avatar_progression import (
    LEVEL_UNLOCKS,
    apply_xp_gain,
    avatar_total_xp,
    calculate_new_unlocks,
    increase_attribute,
    unlock_item,
)
from lifexp.gamification.level_curve import MAX_LEVEL, level_from_total_xp, xp_required_for_level
from lifexp.gamification.rewards import compute_dynamic_reward
from lifexp.models import AttributeType, Avatar


# ============================================================================
# XP Gain
# ============================================================================

def test_small_gain_stays_on_level(avatar):
    result = apply_xp_gain(avatar, 40)

    assert not result.leveled_up
    assert result.level_up is None
    assert result.avatar.level == 1
    assert result.avatar.current_xp == 40


def test_zero_gain_is_noop(avatar):
    result = apply_xp_gain(avatar, 0)
    assert result.avatar == avatar
    assert result.levels_gained == 0


def test_negative_gain_rejected(avatar):
    with pytest.raises(ValidationError):
        apply_xp_gain(avatar, -5)


def test_single_level_up_raises_attributes(avatar):
    result = apply_xp_gain(avatar, 120)

    assert result.leveled_up
    assert result.avatar.level == 2
    assert result.avatar.current_xp == 20
    assert result.avatar.strength == 2
    assert result.avatar.wisdom == 2
    assert result.avatar.intelligence == 2
    assert result.level_up.previous_level == 1
    assert result.level_up.new_level == 2
    assert result.level_up.xp_gained == 120


def test_multi_level_gain_unlocks_every_crossed_level():
    """Test crossing levels 5 and 6 in one gain unlocks the level 5 item"""
    avatar = Avatar(id="a-1", user_id="u-1", level=4, current_xp=300)

    result = apply_xp_gain(avatar, 600)

    assert result.levels_gained == 2
    assert result.avatar.level == 6
    assert result.new_unlocks == ["basic_sword"]
    assert result.avatar.has_unlocked_item("basic_sword")
    assert result.attribute_increases[AttributeType.STRENGTH] == 4


def test_big_jump_unlocks_in_level_order(avatar):
    result = apply_xp_gain(avatar, xp_required_for_level(16))

    assert result.avatar.level == 16
    assert result.new_unlocks == ["basic_sword", "leather_armor", "magic_staff"]


def test_already_owned_items_not_reported():
    avatar = Avatar(id="a-1", user_id="u-1", level=4, unlocked_items=frozenset({"basic_sword"}))
    result = apply_xp_gain(avatar, 600)
    assert result.new_unlocks == []


def test_reward_round_trip_matches_level(daily_task, now):
    """Test re-deriving level from cumulative XP matches the reported new level"""
    avatar = Avatar(id="a-1", user_id="u-1", level=3, current_xp=200)
    reward = compute_dynamic_reward(daily_task, 7, True, now)

    result = apply_xp_gain(avatar, reward)

    expected = level_from_total_xp(avatar_total_xp(avatar) + reward).level
    assert result.avatar.level == expected
    assert result.level_up.new_level == expected


def test_attributes_capped_at_999():
    avatar = Avatar(id="a-1", user_id="u-1", strength=998, wisdom=999, intelligence=10)
    result = apply_xp_gain(avatar, 250)

    assert result.avatar.strength == 999
    assert result.avatar.wisdom == 999
    assert result.attribute_increases[AttributeType.STRENGTH] == 1
    assert result.attribute_increases[AttributeType.WISDOM] == 0
    assert result.attribute_increases[AttributeType.INTELLIGENCE] == 4


def test_level_never_passes_cap(avatar):
    result = apply_xp_gain(avatar, xp_required_for_level(MAX_LEVEL) + 500)

    assert result.avatar.level == MAX_LEVEL
    assert result.avatar.current_xp == 500
    assert set(LEVEL_UNLOCKS.values()) <= result.avatar.unlocked_items


def test_calculate_new_unlocks_range():
    assert calculate_new_unlocks(4, 5) == ["basic_sword"]
    assert calculate_new_unlocks(5, 9) == []
    assert calculate_new_unlocks(9, 10, already_unlocked={"leather_armor"}) == []


# ============================================================================
# Attributes
# ============================================================================

def test_increase_attribute_without_milestone(avatar):
    result = increase_attribute(avatar, AttributeType.WISDOM, 3)

    assert result.new_value == 3
    assert result.milestone_bonus == 0
    assert result.avatar.wisdom == 3


def test_increase_attribute_crossing_milestone():
    avatar = Avatar(id="a-1", user_id="u-1", strength=49)
    result = increase_attribute(avatar, AttributeType.STRENGTH, 1)

    assert result.previous_value == 49
    assert result.milestone_bonus == 5
    assert result.new_value == 55


def test_milestone_not_granted_twice():
    """Test re-raising an attribute already past a milestone grants nothing more"""
    avatar = Avatar(id="a-1", user_id="u-1", strength=49)
    first = increase_attribute(avatar, AttributeType.STRENGTH, 1)
    again = increase_attribute(first.avatar, AttributeType.STRENGTH, 0)

    assert again.milestone_bonus == 0
    assert again.avatar.strength == 55


def test_attribute_capped():
    avatar = Avatar(id="a-1", user_id="u-1", intelligence=995)
    result = increase_attribute(avatar, AttributeType.INTELLIGENCE, 20)
    assert result.new_value == 999


def test_negative_attribute_gain_rejected(avatar):
    with pytest.raises(ValidationError):
        increase_attribute(avatar, AttributeType.STRENGTH, -1)


# ============================================================================
# Items
# ============================================================================

def test_unlock_item_idempotent(avatar):
    once = unlock_item(avatar, "golden_hat")
    twice = unlock_item(once, "golden_hat")

    assert once.has_unlocked_item("golden_hat")
    assert twice is once


def test_unlock_item_rejects_empty_id(avatar):
    with pytest.raises(ValidationError):
        unlock_item(avatar, "")
