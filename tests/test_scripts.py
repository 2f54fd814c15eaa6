import json

import numpy as np

from graphs.equity_convergence import convergence_table
from scripts import bot_selfplay, equity_calc


def test_equity_calc_prints_json(capsys):
    rc = equity_calc.main(["AhAd", "2c2d", "--iters", "3000", "--seed", "4"])
    out = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert out["error"] is None
    assert out["iterations"] == 3000
    assert abs(out["equity"] - 82.0) <= 3.0


def test_equity_calc_reports_error(capsys):
    rc = equity_calc.main(["Ah", "22+"])
    out = json.loads(capsys.readouterr().out)
    assert rc == 1
    assert out["error"] == "InvalidHero"


def test_selfplay_conserves_chips_and_records_hands():
    data = bot_selfplay.run_selfplay(hands=60, seed=8)
    assert data["final"]["hands_played"] == 60
    # net results are zero-sum across the table
    assert sum(data["final"]["net_by_position"].values()) == 0
    for hand in data["hands"]:
        assert hand["actions"]
        assert hand["terminal"]["winners"]
        assert sum(hand["terminal"]["payouts"]) > 0


def test_selfplay_writes_dataset(tmp_path, capsys):
    out = tmp_path / "selfplay.json"
    bot_selfplay.main(["--hands", "5", "--seed", "1", "--out", str(out)])
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["final"]["hands_played"] == 5
    assert "Wrote" in capsys.readouterr().out


def test_convergence_table_shapes_and_spread():
    table = convergence_table("AhAd", "2c2d", iteration_counts=(200, 2000), seeds=4)
    assert list(table["iters"]) == [200, 2000]
    assert table["mean"].shape == (2,)
    assert np.all(np.abs(table["mean"] - 82.0) < 8.0)
    # reported standard error shrinks with more iterations
    assert table["std_error"][1] < table["std_error"][0]
