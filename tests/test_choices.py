"""Tests for choice selection and choice-driven modifiers."""

import pytest

from charsheet.character import Character
from charsheet.errors import InvalidOperationError
from charsheet.model import Item, Model, Modification, Selection, Value


def _stance_model():
    model = Model()
    strength = model.add_value("strength", Value(10))
    dexterity = model.add_value("dexterity", Value(10))
    stance = model.add_choice("stance")
    aggressive = model.add_selection(
        stance, Selection.of([(strength, Modification.add(2))])
    )
    nimble = model.add_selection(
        stance, Selection.of([(dexterity, Modification.add(2))])
    )
    return model, strength, dexterity, stance, aggressive, nimble


class TestSelect:
    def test_nothing_selected_by_default(self):
        model, strength, dexterity, stance, _, _ = _stance_model()
        char = Character(model)
        assert char.selection(stance) == 0
        assert (char.get(strength), char.get(dexterity)) == (10, 10)

    def test_select_applies_modifiers(self):
        model, strength, dexterity, stance, aggressive, _ = _stance_model()
        char = Character(model)
        char.select(stance, aggressive)
        assert char.selection(stance) == aggressive
        assert char.get(strength) == 12

    def test_switch_recomputes_old_and_new_targets(self):
        model, strength, dexterity, stance, aggressive, nimble = _stance_model()
        char = Character(model)
        char.select(stance, aggressive)
        char.select(stance, nimble)
        assert char.get(strength) == 10
        assert char.get(dexterity) == 12

    def test_deselect(self):
        model, strength, _, stance, aggressive, _ = _stance_model()
        char = Character(model)
        char.select(stance, aggressive)
        char.select(stance, 0)
        assert char.get(strength) == 10

    def test_out_of_range(self):
        model, _, _, stance, _, _ = _stance_model()
        char = Character(model)
        with pytest.raises(InvalidOperationError):
            char.select(stance, 3)

    def test_selection_counts_once(self):
        model, strength, _, stance, aggressive, _ = _stance_model()
        char = Character(model)
        char.select(stance, aggressive)
        char.select(stance, aggressive)
        assert char.get(strength) == 12


class TestMixedSources:
    def test_choice_and_item_sorted_by_priority(self):
        model = Model()
        damage = model.add_value("damage", Value(3))
        axe = model.add_item("axe", Item())
        model.add_modification(axe, damage, Modification.multiply(2.0, priority=5))
        style = model.add_choice("style")
        brute = model.add_selection(
            style, Selection.of([(damage, Modification.add(1, priority=0))])
        )

        char = Character(model)
        char.equip(axe)
        assert char.get(damage) == 6
        char.select(style, brute)
        assert char.get(damage) == (3 + 1) * 2

    def test_items_before_choices_on_tie(self):
        model = Model()
        damage = model.add_value("damage", Value(3))
        style = model.add_choice("style")
        brute = model.add_selection(style, Selection.of([(damage, Modification.add(1))]))
        axe = model.add_item("axe", Item())
        model.add_modification(axe, damage, Modification.multiply(2.0))

        char = Character(model)
        char.select(style, brute)
        char.equip(axe)
        assert char.get(damage) == 3 * 2 + 1
