"""Tests for the price_deck command-line job."""

from pathlib import Path

from deckmatch.jobs.price_deck import build_parser, main, price_deck
from deckmatch.models import MatchStatus


class TestPriceDeck:
    def test_runs_pipeline(self, sample_catalog_csv: str, sample_decklist: str) -> None:
        results = price_deck(sample_catalog_csv, sample_decklist)

        assert [r.status for r in results] == [MatchStatus.AUTO_MATCHED] * 2

    def test_inclusion_flags(self, sample_catalog_csv: str) -> None:
        deck = "1 Black Lotus\nSB: 3 Brainstorm"

        excluded = price_deck(sample_catalog_csv, deck)
        included = price_deck(sample_catalog_csv, deck, include_sideboard=True)

        assert excluded[1].status is MatchStatus.UNRESOLVED
        assert included[1].status is MatchStatus.AMBIGUOUS

    def test_fuzzy_flag(self, sample_catalog_csv: str) -> None:
        results = price_deck(sample_catalog_csv, "1 Blak Lotus", fuzzy_enabled=False)

        assert results[0].status is MatchStatus.NOT_FOUND


class TestParser:
    def test_flags(self) -> None:
        args = build_parser().parse_args(
            ["--catalog", "c.html", "--deck", "d.txt", "--include-sideboard", "--no-fuzzy"]
        )

        assert args.catalog == Path("c.html")
        assert args.include_sideboard is True
        assert args.include_commanders is False
        assert args.fuzzy_enabled is False
        assert args.output is None


class TestMain:
    def test_writes_export(
        self,
        tmp_path: Path,
        sample_catalog_csv: str,
        sample_decklist: str,
    ) -> None:
        catalog = tmp_path / "catalog.csv"
        deck = tmp_path / "deck.txt"
        output = tmp_path / "export.csv"
        catalog.write_text(sample_catalog_csv, encoding="utf-8")
        deck.write_text(sample_decklist, encoding="utf-8")

        code = main(["--catalog", str(catalog), "--deck", str(deck), "--output", str(output)])

        assert code == 0
        lines = output.read_text(encoding="utf-8").splitlines()
        assert lines[-1] == "Total Price,11.00"

    def test_bad_catalog_exits_nonzero(self, tmp_path: Path) -> None:
        catalog = tmp_path / "catalog.html"
        deck = tmp_path / "deck.txt"
        output = tmp_path / "export.csv"
        catalog.write_text("<html><body>Maintenance</body></html>", encoding="utf-8")
        deck.write_text("1 Black Lotus", encoding="utf-8")

        code = main(["--catalog", str(catalog), "--deck", str(deck), "--output", str(output)])

        assert code == 1
        assert not output.exists()
