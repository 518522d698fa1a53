"""Smoke tests for the command-line interface."""

import json

from optstrat.cli import main


def test_greeks(capsys):
    assert main(["greeks", "--S", "100", "--K", "100", "--T", "1", "--r", "0.05",
                 "--sigma", "0.2", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert abs(out["price"] - 10.4506) < 1e-3
    assert set(out) == {"price", "delta", "gamma", "theta", "vega", "rho"}


def test_iv(capsys):
    assert main(["iv", "--S", "100", "--K", "100", "--T", "1", "--r", "0.05",
                 "--price", "10.4506", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["converged"]
    assert abs(out["volatility"] - 0.2) < 1e-3


def test_analyze_json(capsys):
    assert main(["analyze", "--template", "long-call", "--spot", "100", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["breakevens"] == [105.0]
    assert out["metrics"]["max_loss"] == -500.0
    assert out["position_size"] == 1
    assert "curve" not in out


def test_analyze_text_uses_mock_quote(capsys):
    assert main(["analyze", "--template", "iron-condor", "--symbol", "spy"]) == 0
    out = capsys.readouterr().out
    assert "Iron Condor on SPY @ 525.40" in out
    assert "breakevens" in out


def test_unknown_symbol_is_error():
    assert main(["analyze", "--template", "long-put", "--symbol", "ZZZZ"]) == 2


def test_invalid_input_is_error():
    assert main(["greeks", "--S", "100", "--K", "0", "--T", "1", "--r", "0.05",
                 "--sigma", "0.2"]) == 2


def test_templates(capsys):
    assert main(["templates"]) == 0
    assert "bull-call-spread" in capsys.readouterr().out
