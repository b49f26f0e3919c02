"""Tests for character models."""

from charbuilder.characters.models import AbilityScores, CalculatedStats, Character, ProficiencyStat


class TestAbilityScores:
    """Test ability score access and conversion."""

    def test_defaults(self):
        """Test every score defaults to 10."""
        assert AbilityScores().to_dict() == {
            "str": 10, "dex": 10, "con": 10, "int": 10, "wis": 10, "cha": 10,
        }

    def test_short_and_full_names(self):
        """Test scores by short or full ability name."""
        scores = AbilityScores(dexterity=14)
        assert scores.get_score("dex") == 14
        assert scores.get_score("Dexterity") == 14
        assert scores["DEX"] == 14

    def test_from_dict(self):
        """Test either key style is accepted."""
        scores = AbilityScores.from_dict({"str": 15, "wisdom": 12})
        assert scores.strength == 15
        assert scores.wisdom == 12
        assert scores.charisma == 10

    def test_from_dict_invalid_values(self):
        """Test non-numeric scores default to 10."""
        scores = AbilityScores.from_dict({"str": "high", "dex": None, "con": True, "int": 13.0})
        assert scores.to_dict() == {
            "str": 10, "dex": 10, "con": 10, "int": 13, "wis": 10, "cha": 10,
        }

    def test_from_missing_dict(self):
        """Test a missing score block gives defaults."""
        assert AbilityScores.from_dict(None) == AbilityScores()


class TestCharacter:
    """Test the external character format."""

    def test_from_dict(self):
        """Test reading a character document."""
        character = Character.from_dict({
            "id": "abc",
            "name": "Elara",
            "race": "Elf",
            "subrace": "Wood",
            "className": "Wizard",
            "background": "Sage",
            "level": 3,
            "abilityScores": {"int": 16},
            "classSkillChoices": ["Arcana"],
            "equipment": ["Scholar's Pack"],
            "portrait": "elara.png",
        })
        assert character.class_name == "Wizard"
        assert character.ability_scores.intelligence == 16
        assert character.class_skill_choices == ["Arcana"]
        assert character.background_skill_choices == []
        assert character.extra == {"portrait": "elara.png"}

    def test_round_trip_keeps_unknown_keys(self):
        """Test unmodelled fields are written back unchanged."""
        data = {
            "name": "Elara",
            "race": "Elf",
            "className": "Wizard",
            "background": "Sage",
            "level": 3,
            "portrait": "elara.png",
        }
        result = Character.from_dict(data).to_dict()
        assert result["portrait"] == "elara.png"
        assert result["className"] == "Wizard"
        assert "subrace" not in result
        assert "calculatedStats" not in result

    def test_effective_level(self):
        """Test invalid levels count as 1."""
        assert Character(level=4).effective_level == 4
        assert Character(level=0).effective_level == 1
        assert Character(level="3").effective_level == 1
        assert Character(level=True).effective_level == 1

    def test_calculated_stats_round_trip(self):
        """Test stored stats are read back."""
        stats = CalculatedStats(
            ac=12, initiative=2, speed=30, passive_perception=11, proficiency_bonus=2,
            saving_throws={"str": ProficiencyStat(True, 4)},
            hp=12, max_hp=12, hit_die="1d10",
            skills={"Athletics": ProficiencyStat(True, 4)},
            expanded_equipment=["Longsword"],
        )
        character = Character(name="Tordek", calculated_stats=stats)
        restored = Character.from_dict(character.to_dict())
        assert restored.calculated_stats == stats
