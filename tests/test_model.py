"""Tests for Model construction and edge wiring."""

import pytest

from charsheet.character import Character
from charsheet.config import EngineConfig
from charsheet.errors import (
    CyclicDependencyError,
    DuplicateIdError,
    InvalidModelError,
    UnboundPlaceholderError,
)
from charsheet.model import (
    Calculation,
    Choice,
    FrontEnd,
    Inventory,
    Item,
    Model,
    Modification,
    Selection,
    Value,
    ValueId,
)


# ===========================================================================
# Ids and lookups
# ===========================================================================


class TestIds:
    def test_dense_ids_per_kind(self):
        model = Model()
        a = model.add_value("a", Value(1))
        b = model.add_value("b", 2)
        sword = model.add_item("sword", Item())
        assert (a.index, b.index, sword.index) == (0, 1, 0)
        assert a != sword
        assert model.value(b).default == 2

    def test_lookup_by_name(self):
        model = Model()
        strength = model.add_value("strength", Value(10))
        bag = model.add_inventory("bag")
        race = model.add_choice("race")
        sword = model.add_item("sword")
        assert model.value_id("strength") == strength
        assert model.inventory_id("bag") == bag
        assert model.choice_id("race") == race
        assert model.item_id("sword") == sword

    def test_unknown_name(self):
        with pytest.raises(KeyError):
            Model().value_id("missing")

    def test_duplicate_within_namespace(self):
        model = Model()
        model.add_value("strength", Value(10))
        with pytest.raises(DuplicateIdError) as exc:
            model.add_value("strength", Value(5))
        assert exc.value.namespace == "value"
        assert len(model.values) == 1

    def test_same_name_in_different_namespaces(self):
        model = Model()
        model.add_value("shield", Value(0))
        model.add_item("shield", Item())
        assert model.item_id("shield").index == 0

    def test_front_end_metadata(self):
        model = Model()
        strength = model.add_value(
            "strength", Value(10).frontend(FrontEnd("Strength", "STR"))
        )
        sword = model.add_item(
            "sword", Item().frontend(FrontEnd("Sword", description="Sharp"))
        )
        assert model.value(strength).front_end.name_short == "STR"
        assert model.item(sword).front_end.description == "Sharp"
        assert Character(model).get(strength) == 10

    def test_foreign_id_is_rejected(self):
        model = Model()
        model.add_value("a", Value(0))
        with pytest.raises(InvalidModelError):
            model.add_dependency(ValueId(7), Calculation.constant(1))


# ===========================================================================
# Edge wiring
# ===========================================================================


class TestWiring:
    def test_dependency_registers_dependents(self):
        model = Model()
        strength = model.add_value("strength", Value(2))
        burden = model.add_value("max_burden", Value(20))
        model.add_dependency(burden, 10 * strength)
        assert model.value(strength).dependents == [burden]
        assert len(model.value(burden).dependencies) == 1
        assert model.graph.dependents_of(strength.index) == [burden.index]

    def test_dependencies_declared_on_value(self):
        model = Model()
        a = model.add_value("a", Value(1))
        b = model.add_value("b", Value(0, dependencies=[Calculation.of(a) * 3]))
        assert model.value(a).dependents == [b]

    def test_value_with_edges_is_rejected(self):
        model = Model()
        with pytest.raises(InvalidModelError):
            model.add_value("a", Value(0, dependents=[ValueId(0)]))

    def test_modification_binds_placeholder(self):
        model = Model()
        armor = model.add_value("armor", Value(0))
        plate = model.add_item("plate", Item())
        model.add_modification(plate, armor, Modification(0, Calculation.placeholder() + 10))
        bound = model.item(plate).modifications[armor]
        assert not bound.calculation.has_placeholder
        assert list(bound.calculation.values()) == [armor]
        assert model.value(armor).modifying_items == [plate]

    def test_modification_reading_other_value(self):
        model = Model()
        dex = model.add_value("dexterity", Value(2))
        armor = model.add_value("armor", Value(0))
        shield = model.add_item("shield", Item())
        model.add_modification(shield, armor, Modification.add(dex))
        assert model.value(dex).dependents == [armor]

    def test_modifications_declared_on_item(self):
        model = Model()
        armor = model.add_value("armor", Value(0))
        plate = model.add_item(
            "plate", Item(modifications={armor: Modification.add(3)})
        )
        assert model.value(armor).modifying_items == [plate]

    def test_condition_registers_item(self):
        model = Model()
        burden = model.add_value("burden", Value(0))
        max_burden = model.add_value("max_burden", Value(20))
        heavy = model.add_item("heavy", Item().set_condition(burden.gt(max_burden)))
        assert model.value(burden).conditions == [heavy]
        assert model.value(max_burden).conditions == [heavy]

    def test_selection_indices_start_at_one(self):
        model = Model()
        con = model.add_value("constitution", Value(10))
        race = model.add_choice("race", Choice())
        first = model.add_selection(race, Selection.of([(con, Modification.add(2))]))
        second = model.add_selection(race, Selection())
        assert (first, second) == (1, 2)
        assert model.value(con).modifying_choices == [race]
        assert len(model.choice(race).options) == 3

    def test_choice_declared_with_options(self):
        model = Model()
        con = model.add_value("constitution", Value(10))
        race = model.add_choice(
            "race",
            Choice(options=[Selection(), Selection({con: Modification.add(2)})]),
        )
        assert model.value(con).modifying_choices == [race]

    def test_option_zero_cannot_modify(self):
        model = Model()
        con = model.add_value("constitution", Value(10))
        with pytest.raises(InvalidModelError):
            model.add_choice("race", Choice(options=[Selection({con: Modification.add(2)})]))

    def test_main_inventory(self):
        model = Model()
        assert model.main_inventory is None
        bag = model.add_inventory("bag", Inventory().capacity(10))
        model.set_main_inventory(bag)
        assert model.main_inventory == bag


# ===========================================================================
# Rejected models
# ===========================================================================


class TestRejected:
    def test_unbound_dependency(self):
        model = Model()
        a = model.add_value("a", Value(0))
        with pytest.raises(UnboundPlaceholderError):
            model.add_dependency(a, Calculation.placeholder() + 1)

    def test_dependency_cycle_leaves_model_unchanged(self):
        model = Model()
        a = model.add_value("a", Value(0))
        b = model.add_value("b", Value(0))
        model.add_dependency(b, a + 1)
        with pytest.raises(CyclicDependencyError):
            model.add_dependency(a, b * 2)
        assert model.value(a).dependencies == []
        assert model.value(b).dependents == []

    def test_self_dependency(self):
        model = Model()
        a = model.add_value("a", Value(0))
        with pytest.raises(CyclicDependencyError):
            model.add_dependency(a, a + 1)

    def test_modification_cycle(self):
        model = Model()
        a = model.add_value("a", Value(0))
        b = model.add_value("b", Value(0))
        model.add_dependency(b, Calculation.of(a))
        ring = model.add_item("ring", Item())
        with pytest.raises(CyclicDependencyError):
            model.add_modification(ring, a, Modification.add(b))
        assert model.item(ring).modifications == {}
        assert model.value(a).modifying_items == []

    def test_condition_reading_its_target(self):
        model = Model()
        hp = model.add_value("hp", Value(10))
        bloodied = model.add_item("bloodied", Item().set_condition(hp.lt(5)))
        with pytest.raises(CyclicDependencyError):
            model.add_modification(bloodied, hp, Modification.add(1))

    def test_selection_cycle_is_atomic(self):
        model = Model()
        a = model.add_value("a", Value(0))
        b = model.add_value("b", Value(0))
        model.add_dependency(b, Calculation.of(a))
        stance = model.add_choice("stance")
        with pytest.raises(CyclicDependencyError):
            model.add_selection(stance, Selection({a: Modification.add(b)}))
        assert len(model.choice(stance).options) == 1
        assert model.value(a).modifying_choices == []

    def test_conditional_item_cycle_is_atomic(self):
        model = Model()
        x = model.add_value("x", Value(0))
        y = model.add_value("y", Value(0))
        model.add_dependency(x, Calculation.of(y))
        loop = Item(modifications={y: Modification.add(1)}).set_condition(x.gt(0))
        with pytest.raises(CyclicDependencyError):
            model.add_item("loop", loop)
        assert len(model.items) == 0
        assert model.value(x).conditions == []
        assert model.value(y).modifying_items == []
        assert model.graph.dependents_of(x.index) == []

        # The id string is still free after the rejected call.
        assert model.add_item("loop", Item().set_condition(x.gt(0))).index == 0

    def test_item_modifications_are_atomic(self):
        model = Model()
        a = model.add_value("a", Value(0))
        b = model.add_value("b", Value(0))
        c = model.add_value("c", Value(0))
        model.add_dependency(b, Calculation.of(a))
        ring = Item(modifications={c: Modification.add(1), a: Modification.add(b)})
        with pytest.raises(CyclicDependencyError):
            model.add_item("ring", ring)
        assert len(model.items) == 0
        assert model.value(c).modifying_items == []
        assert model.value(b).dependents == []

    def test_value_dependencies_are_atomic(self):
        model = Model()
        a = model.add_value("a", Value(1))
        pending = [Calculation.of(a) * 2, Calculation.placeholder() + 1]
        with pytest.raises(UnboundPlaceholderError):
            model.add_value("b", Value(0, dependencies=pending))
        assert len(model.values) == 1
        assert len(model.graph) == 1
        assert model.value(a).dependents == []
        assert model.add_value("b", 0).index == 1

    def test_choice_selections_are_atomic(self):
        model = Model()
        a = model.add_value("a", Value(0))
        b = model.add_value("b", Value(0))
        c = model.add_value("c", Value(0))
        model.add_dependency(b, Calculation.of(a))
        options = [
            Selection(),
            Selection({c: Modification.add(1)}),
            Selection({a: Modification.add(b)}),
        ]
        with pytest.raises(CyclicDependencyError):
            model.add_choice("stance", Choice(options=options))
        assert len(model.choices) == 0
        assert model.value(c).modifying_choices == []
        assert model.value(a).modifying_choices == []
        assert model.add_choice("stance").index == 0

    def test_cycle_check_can_be_disabled(self):
        model = Model(EngineConfig(detect_cycles=False))
        a = model.add_value("a", Value(0))
        b = model.add_value("b", Value(0))
        model.add_dependency(b, Calculation.of(a))
        model.add_dependency(a, Calculation.of(b))
        with pytest.raises(CyclicDependencyError):
            Character(model)

    def test_container_item_cannot_be_conditional(self):
        model = Model()
        a = model.add_value("a", Value(0))
        bag = model.add_inventory("bag")
        with pytest.raises(InvalidModelError):
            model.add_item("sack", Item().set_inventory(bag).set_condition(a))

    def test_sealed_after_character(self):
        model = Model()
        model.add_value("a", Value(0))
        Character(model)
        assert model.sealed
        with pytest.raises(InvalidModelError):
            model.add_value("b", Value(0))

    def test_physical_needs_positive_stack(self):
        with pytest.raises(ValueError):
            Item().set_physical(1, 0)

    def test_priority_range(self):
        with pytest.raises(ValueError):
            Modification(70000, Calculation.placeholder())
