"""
Smoke test for the quick start demonstration.
"""

import quickstart


def test_quickstart_runs(tmp_path, monkeypatch):
    """Test that the demo runs end to end and writes its exports."""
    monkeypatch.chdir(tmp_path)

    quickstart.main()

    assert (tmp_path / "exports" / "week_1.ics").read_text().startswith("BEGIN:VCALENDAR")
    assert list((tmp_path / "exports").glob("*.tcx"))
