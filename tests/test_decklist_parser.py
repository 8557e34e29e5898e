"""Tests for the decklist parser."""

from deckmatch.models import Section
from deckmatch.parsers.decklist import parse_decklist, parse_line, strip_markup


class TestParseLine:
    """Tests for single line parsing."""

    def test_quantity_and_name(self) -> None:
        entry = parse_line("4 Lightning Bolt")

        assert entry is not None
        assert entry.qty == 4
        assert entry.card_name == "Lightning Bolt"
        assert entry.set_hint is None
        assert entry.collector_hint is None

    def test_quantity_defaults_to_one(self) -> None:
        entry = parse_line("Black Lotus")

        assert entry is not None
        assert entry.qty == 1
        assert entry.card_name == "Black Lotus"

    def test_x_suffix_quantity(self) -> None:
        entry = parse_line("4x Brainstorm")

        assert entry is not None
        assert entry.qty == 4
        assert entry.card_name == "Brainstorm"

    def test_name_starting_with_x(self) -> None:
        entry = parse_line("1 Xenagos, the Reveler")

        assert entry is not None
        assert entry.card_name == "Xenagos, the Reveler"

    def test_set_hint(self) -> None:
        entry = parse_line("4 Lightning Bolt (M11)")

        assert entry is not None
        assert entry.card_name == "Lightning Bolt"
        assert entry.set_hint == "M11"

    def test_set_hint_uppercased(self) -> None:
        entry = parse_line("4 Lightning Bolt (m11)")

        assert entry is not None
        assert entry.set_hint == "M11"

    def test_collector_inside_parens(self) -> None:
        entry = parse_line("4 Brainstorm (MMQ 123)")

        assert entry is not None
        assert entry.set_hint == "MMQ"
        assert entry.collector_hint == "123"

    def test_collector_after_parens(self) -> None:
        entry = parse_line("4 Lightning Bolt (LEB) 163")

        assert entry is not None
        assert entry.card_name == "Lightning Bolt"
        assert entry.set_hint == "LEB"
        assert entry.collector_hint == "163"

    def test_html_stripped(self) -> None:
        entry = parse_line("4 <b>Lightning&nbsp;Bolt</b>")

        assert entry is not None
        assert entry.card_name == "Lightning Bolt"

    def test_entities_decoded(self) -> None:
        entry = parse_line("1 Juz&aacute;m Djinn")

        assert entry is not None
        assert entry.card_name == "Juzám Djinn"

    def test_zero_quantity_skipped(self) -> None:
        assert parse_line("0 Lightning Bolt") is None

    def test_bare_number_skipped(self) -> None:
        assert parse_line("42") is None

    def test_blank_skipped(self) -> None:
        assert parse_line("   ") is None

    def test_original_line_kept(self) -> None:
        entry = parse_line("4 <i>Lightning Bolt</i> ")

        assert entry is not None
        assert entry.original_line == "4 <i>Lightning Bolt</i>"


class TestStripMarkup:
    def test_tags_and_whitespace(self) -> None:
        assert strip_markup("<p>4  <span>Bolt</span></p>") == "4 Bolt"


class TestParseDecklist:
    """Tests for full decklist parsing and sections."""

    def test_empty(self) -> None:
        assert parse_decklist("") == []
        assert parse_decklist("\n\n  \n") == []

    def test_main_entries_included(self, sample_decklist: str) -> None:
        entries = parse_decklist(sample_decklist)

        assert [(e.qty, e.card_name, e.set_hint) for e in entries] == [
            (4, "Lightning Bolt", "M11"),
            (1, "Black Lotus", None),
        ]
        assert all(e.section is Section.MAIN for e in entries)
        assert all(e.include for e in entries)

    def test_sideboard_header(self) -> None:
        entries = parse_decklist("SIDEBOARD:\n3 Thoughtseize")

        assert len(entries) == 1
        assert entries[0].card_name == "Thoughtseize"
        assert entries[0].section is Section.SIDEBOARD
        assert entries[0].include is False

    def test_sb_prefix_with_card(self) -> None:
        entries = parse_decklist("4 Lightning Bolt\nSB: 3 Thoughtseize")

        assert entries[1].qty == 3
        assert entries[1].card_name == "Thoughtseize"
        assert entries[1].section is Section.SIDEBOARD

    def test_sideboard_prefix_case_insensitive(self) -> None:
        entries = parse_decklist("sideboard:\n1 Duress")

        assert entries[0].section is Section.SIDEBOARD

    def test_blank_line_after_sideboard_starts_commander(self) -> None:
        text = "1 Sol Ring\nSIDEBOARD:\n2 Duress\n\n1 Atraxa, Praetors' Voice"
        entries = parse_decklist(text)

        assert [e.section for e in entries] == [
            Section.MAIN,
            Section.SIDEBOARD,
            Section.COMMANDER,
        ]
        assert entries[2].include is False

    def test_blank_line_right_after_sideboard_header_starts_commander(self) -> None:
        entries = parse_decklist("SIDEBOARD:\n\n3 Thoughtseize")

        assert len(entries) == 1
        assert entries[0].section is Section.COMMANDER
        assert entries[0].include is False

    def test_entities_decoded_once(self) -> None:
        entries = parse_decklist("1 Fire &amp;lt;Ice&amp;gt;")

        assert entries[0].card_name == "Fire &lt;Ice&gt;"

    def test_blank_line_in_main_is_separator_only(self) -> None:
        entries = parse_decklist("4 Lightning Bolt\n\n1 Black Lotus")

        assert [e.section for e in entries] == [Section.MAIN, Section.MAIN]

    def test_arena_headers(self) -> None:
        text = """Deck
4 Lightning Bolt (LEB) 163
20 Mountain (NEO) 290

Sideboard
2 Abrade (VOW) 139"""
        entries = parse_decklist(text)

        assert [(e.card_name, e.section) for e in entries] == [
            ("Lightning Bolt", Section.MAIN),
            ("Mountain", Section.MAIN),
            ("Abrade", Section.SIDEBOARD),
        ]
        assert entries[0].collector_hint == "163"

    def test_commander_prefix(self) -> None:
        entries = parse_decklist("Commander: 1 Atraxa, Praetors' Voice\n1 Sol Ring")

        assert entries[0].section is Section.COMMANDER
        assert entries[0].card_name == "Atraxa, Praetors' Voice"

    def test_comments_skipped(self) -> None:
        entries = parse_decklist("# burn\n// sideboard plan\n4 Lightning Bolt")

        assert [e.card_name for e in entries] == ["Lightning Bolt"]

    def test_duplicates_not_merged(self) -> None:
        entries = parse_decklist("2 Lightning Bolt\n2 Lightning Bolt")

        assert len(entries) == 2
        assert all(e.qty == 2 for e in entries)

    def test_malformed_lines_skipped(self) -> None:
        entries = parse_decklist("0 Lightning Bolt\n17\n1 Black Lotus")

        assert [e.card_name for e in entries] == ["Black Lotus"]

    def test_order_preserved(self) -> None:
        names = ["Brainstorm", "Ponder", "Preordain", "Counterspell"]
        entries = parse_decklist("\n".join(f"1 {name}" for name in names))

        assert [e.card_name for e in entries] == names
