#!/usr/bin/env python3
"""Batch report: Greeks and expiration risk for a book of option legs.

Usage
-----
    python scripts/strategy_book.py --input legs.csv --spot 100 --output report.json
    python scripts/strategy_book.py --input legs.csv --spot 100 --vol-pct 30 --output legs_out.csv

Input CSV format
----------------
    id,kind,strike,premium,quantity,position,expiration,underlying
    c1,call,100,5,1,long,2024-12-31,AAPL
    c2,call,110,2,1,short,2024-12-31,AAPL

Output
------
    CSV: one row per leg (weighted Greeks, payoff at spot) plus a TOTAL row.
    JSON: legs, totals, breakevens, risk metrics and recommended size.
"""

from __future__ import annotations
import argparse
import csv
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from optstrat.core import Contract, MarketParameters, PriceRange
from optstrat.errors import InvalidInputError
from optstrat.payoff import contract_payoff
from optstrat.strategy import Strategy, analyze


def _contract_from_row(row: dict) -> Contract:
    return Contract(
        id=row["id"].strip(),
        kind=row["kind"].strip().lower(),
        strike=float(row["strike"]),
        premium=float(row["premium"]),
        quantity=int(row.get("quantity") or 1),
        position=(row.get("position") or "long").strip().lower(),
        expiration=(row.get("expiration") or "").strip(),
        underlying=(row.get("underlying") or "").strip(),
    )


def main():
    parser = argparse.ArgumentParser(description="Report Greeks and risk for a book of legs.")
    parser.add_argument("--input", required=True, help="Path to legs CSV")
    parser.add_argument("--output", required=True, help="Output path (.csv or .json)")
    parser.add_argument("--spot", type=float, required=True)
    parser.add_argument("--rate-pct", dest="rate_pct", type=float, default=5.0)
    parser.add_argument("--vol-pct", dest="vol_pct", type=float, default=25.0)
    parser.add_argument("--days", type=float, default=30.0)
    parser.add_argument("--account", type=float, default=10_000.0)
    parser.add_argument("--risk-pct", dest="risk_pct", type=float, default=2.0)
    args = parser.parse_args()

    with open(args.input, newline="") as f:
        rows = list(csv.DictReader(f))

    print(f"Loading {len(rows)} legs...")

    contracts = []
    for i, row in enumerate(rows):
        try:
            contracts.append(_contract_from_row(row))
        except (InvalidInputError, KeyError, ValueError) as e:
            print(f"  Row {i} (id={row.get('id', '?')}): SKIPPED: {e}")

    if not contracts:
        print("No valid legs to report.")
        return

    market = MarketParameters.from_dashboard(args.spot, args.rate_pct, args.vol_pct, args.days)
    strategy = Strategy(market=market, contracts=tuple(contracts), name=Path(args.input).stem)
    result = analyze(strategy, account_size=args.account, risk_pct=args.risk_pct,
                     price_range=PriceRange.around(args.spot))

    legs = []
    for c in contracts:
        g = result.greeks.for_contract(c.id)
        legs.append({
            "id": c.id,
            "kind": c.kind,
            "position": c.position,
            "strike": c.strike,
            "quantity": c.quantity,
            "payoff_at_spot": float(contract_payoff(c, args.spot)),
            **g.as_dict(),
        })

    output_path = Path(args.output)
    if output_path.suffix == ".json":
        m = result.metrics
        report = {
            "legs": legs,
            "totals": result.total_greeks.as_dict(),
            "breakevens": list(m.breakevens),
            "max_profit": m.max_profit,
            "max_loss": m.max_loss,
            "probability_of_profit": m.probability_of_profit,
            "risk_reward_ratio": m.risk_reward_ratio,
            "unbounded_profit": result.tail.unbounded_profit,
            "unbounded_loss": result.tail.unbounded_loss,
            "position_size": result.position_size,
        }
        with open(output_path, "w") as f:
            json.dump(report, f, indent=2, default=str)
    else:
        total = {"id": "TOTAL", **result.total_greeks.as_dict()}
        fieldnames = list(legs[0].keys())
        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(legs)
            writer.writerow(total)

    print(f"Report written to {args.output}")
    print(f"  Legs: {len(contracts)}  |  Skipped: {len(rows) - len(contracts)}"
          f"  |  Recommended size: {result.position_size}")


if __name__ == "__main__":
    main()
