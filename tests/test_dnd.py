"""A small D&D-style sheet: ability modifiers and a race choice."""

from charsheet.character import Character
from charsheet.model import Choice, Model, Modification, Selection, Value

ABILITIES = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)


def _dnd_model() -> Model:
    model = Model()
    for ability in ABILITIES:
        score = model.add_value(ability, Value(10))
        modifier = model.add_value(f"{ability}_mod", Value(0))
        model.add_dependency(modifier, score / 2 - 5)

    race = model.add_choice("race", Choice())
    model.add_selection(
        race,
        Selection.of([(model.value_id("constitution"), Modification.add(2))]),
    )
    return model


def _mod(char: Character, ability: str) -> int:
    return char.get(char.model.value_id(f"{ability}_mod"))


class TestAbilityModifiers:
    def test_defaults(self):
        char = Character(_dnd_model())
        assert [_mod(char, a) for a in ABILITIES] == [0] * 6

    def test_modifier_table(self):
        model = _dnd_model()
        char = Character(model)
        char.set_base(model.value_id("strength"), 1)
        char.set_base(model.value_id("dexterity"), 30)
        char.set_base(model.value_id("constitution"), 10)
        char.set_base(model.value_id("intelligence"), 11)

        assert _mod(char, "strength") == -5
        assert _mod(char, "dexterity") == 10
        assert _mod(char, "constitution") == 0
        assert _mod(char, "intelligence") == 0

    def test_odd_scores_round_down(self):
        model = _dnd_model()
        char = Character(model)
        char.set_base(model.value_id("wisdom"), 9)
        char.set_base(model.value_id("charisma"), 17)
        assert _mod(char, "wisdom") == -1
        assert _mod(char, "charisma") == 3


class TestRace:
    def test_dwarf_raises_constitution(self):
        model = _dnd_model()
        race = model.choice_id("race")
        constitution = model.value_id("constitution")

        char = Character(model)
        char.select(race, 1)
        assert char.get(constitution) == 12
        assert char.base(constitution) == 10
        assert _mod(char, "constitution") == 1

        char.select(race, 0)
        assert char.get(constitution) == 10
        assert _mod(char, "constitution") == 0
