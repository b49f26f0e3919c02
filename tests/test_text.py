"""Tests for rule-text tag parsing."""

from charbuilder.rules.text import (
    DEFAULT_VARIANT_RULE,
    Tag,
    extract_tags,
    parse_item_name,
    spell_names_in,
    strip_tags,
)


class TestStripTags:
    """Test replacing tags with display names."""

    def test_typed_tag(self):
        """Test a typed tag becomes its name."""
        assert strip_tags("Cast {@spell fireball|phb} now.") == "Cast fireball now."

    def test_multiple_tags(self):
        """Test every tag in a string is replaced."""
        text = "You are {@condition blinded} and take {@damage 2d6} damage."
        assert strip_tags(text) == "You are blinded and take 2d6 damage."

    def test_italic_marker(self):
        """Test italic markers keep their text."""
        assert strip_tags("{@i Player's Handbook}") == "Player's Handbook"

    def test_variant_rule_from_second_part(self):
        """Test a bare variant rule tag takes its name from the next part."""
        assert strip_tags("{@variantrule|Multiclassing}") == "Multiclassing"

    def test_bare_variant_rule(self):
        """Test a bare variant rule tag with no name."""
        assert strip_tags("{@variantrule}") == DEFAULT_VARIANT_RULE

    def test_plain_text_unchanged(self):
        """Test text without tags is returned as-is."""
        assert strip_tags("No markup here") == "No markup here"

    def test_non_string_passthrough(self):
        """Test non-string values are returned unchanged."""
        assert strip_tags(None) is None
        assert strip_tags(5) == 5


class TestExtractTags:
    """Test extracting resolvable references."""

    def test_typed_tags_in_order(self):
        """Test tags are returned in order of appearance."""
        tags = extract_tags("{@spell Fireball|PHB} leaves you {@condition blinded}.")
        assert tags == [
            Tag("spell", "Fireball", "{@spell Fireball|PHB}"),
            Tag("condition", "blinded", "{@condition blinded}"),
        ]

    def test_hit_and_miss_markers(self):
        """Test hit and miss markers."""
        tags = extract_tags("{@h}5 damage. {@m}half.")
        assert [(t.type, t.name) for t in tags] == [("hit", "Hit"), ("miss", "Miss")]

    def test_skipped_types(self):
        """Test book, chapter and italic tags are not references."""
        text = "{@book Chapter 5|PHB|5} {@5etools Races|races.html} {@i italic}"
        assert extract_tags(text) == []

    def test_spell_list_reference_skipped(self):
        """Test references to whole spell lists are skipped."""
        assert extract_tags("{@spell wizard spell list}") == []

    def test_filter_maps_to_target_type(self):
        """Test filter tags take the type they filter on."""
        tags = extract_tags("{@filter cleric spells|spells|class=cleric}")
        assert tags[0].type == "spell"

    def test_unknown_filter_skipped(self):
        """Test filters on unrecognized types are skipped."""
        assert extract_tags("{@filter martial weapons|weapons}") == []

    def test_variant_rule_default_name(self):
        """Test a variant rule tag without a name."""
        tags = extract_tags("{@variantrule}")
        assert tags == [Tag("variantrule", DEFAULT_VARIANT_RULE, "{@variantrule}")]

    def test_unknown_tag(self):
        """Test unrecognized tag types are reported as unknown."""
        tags = extract_tags("{@sense darkvision}")
        assert tags == [Tag("unknown", "sense darkvision", "{@sense darkvision}")]

    def test_non_string(self):
        """Test non-string input has no tags."""
        assert extract_tags(None) == []


class TestItemAndSpellNames:
    """Test item and spell name helpers."""

    def test_parse_item_tag(self):
        """Test item markup yields the item name."""
        assert parse_item_name("{@item longsword|phb}") == "longsword"

    def test_parse_plain_item(self):
        """Test plain item text is returned stripped of tags."""
        assert parse_item_name("a {@condition blinded} goblin") == "a blinded goblin"

    def test_spell_names(self):
        """Test spell names are extracted without sources."""
        text = "{@spell Fire Bolt}, {@spell Cure Wounds|PHB}"
        assert spell_names_in(text) == ["Fire Bolt", "Cure Wounds"]
