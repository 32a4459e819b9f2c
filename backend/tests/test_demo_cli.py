"""Tests for the demo CLI."""

import sys

import pytest

import demo_cli
from conftest import ANCHOR


class TestSampleSnapshot:
    """Test the built-in sample history."""

    def test_sample_cases_use_adjusted_totals(self) -> None:
        """Test sample case totals are MPPR-adjusted."""
        cases = demo_cli.build_sample_snapshot(ANCHOR)

        assert len(cases) == 7
        # 27447 (20.72) + 20610 (0.79 at 50%)
        assert cases[0]["totalRvu"] == pytest.approx(21.115, abs=0.01)
        assert cases[0]["estimatedValue"] == pytest.approx(cases[0]["totalRvu"] * 65.0, abs=0.01)


class TestMain:
    """Test CLI entry point."""

    def test_adjust(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
        """Test --adjust prints the breakdown."""
        monkeypatch.setattr(sys, "argv", ["demo_cli.py", "--adjust", "A:10", "B:6", "C:6", "--rate", "65"])

        demo_cli.main()

        out = capsys.readouterr().out
        assert "Primary procedure (100%)" in out
        assert "16.00" in out
        assert "$1,040.00" in out

    def test_sample_all_views(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
        """Test --sample prints every view."""
        monkeypatch.setattr(sys, "argv", ["demo_cli.py", "--sample"])

        demo_cli.main()

        out = capsys.readouterr().out
        for title in ("DASHBOARD", "ANALYTICS", "PROCEDURE RANKINGS", "COMMON CODES"):
            assert title in out

    def test_missing_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        """Test a missing snapshot file exits with status 1."""
        monkeypatch.setattr(sys, "argv", ["demo_cli.py", "--file", str(tmp_path / "nope.json")])

        with pytest.raises(SystemExit) as exc_info:
            demo_cli.main()
        assert exc_info.value.code == 1

    def test_invalid_snapshot(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        """Test a snapshot with a negative total exits with status 2."""
        path = tmp_path / "cases.json"
        path.write_text('[{"totalRvu": -1}]')
        monkeypatch.setattr(sys, "argv", ["demo_cli.py", "--file", str(path), "--view", "dashboard"])

        with pytest.raises(SystemExit) as exc_info:
            demo_cli.main()
        assert exc_info.value.code == 2
