import argparse
import json
import logging
import sys
from dataclasses import asdict

from .black_scholes import greeks, implied_vol, price
from .core import CALL, PUT, MarketParameters, PriceRange
from .errors import InvalidInputError, is_unbounded
from .market_data import MOCK_QUOTES, get_mock_quote
from .strategy import DEFAULT_ACCOUNT_SIZE, DEFAULT_RISK_PCT, analyze
from .templates import STRATEGY_TEMPLATES, strategy_from_template

logger = logging.getLogger("optstrat")


def _kind(s: str):
    s = s.lower()
    if s in {"call", "c"}:
        return CALL
    if s in {"put", "p"}:
        return PUT
    raise argparse.ArgumentTypeError("kind must be 'call' or 'put'")


def _fmt(v, spec=".2f"):
    return "unbounded" if is_unbounded(v) else format(v, spec)


def add_common(parser: argparse.ArgumentParser):
    parser.add_argument("--S", type=float, required=True, help="spot")
    parser.add_argument("--K", type=float, required=True, help="strike")
    parser.add_argument("--T", type=float, required=True, help="years")
    parser.add_argument("--r", type=float, required=True, help="risk-free rate (fraction)")
    parser.add_argument("--kind", type=_kind, default=CALL, help="call|put")


def cmd_greeks(args):
    px = price(args.S, args.K, args.T, args.r, args.sigma, args.kind)
    g = greeks(args.S, args.K, args.T, args.r, args.sigma, args.kind)
    if args.json:
        print(json.dumps({"price": px, **g.as_dict()}, indent=2))
        return
    print(f"price  {px:.6f}")
    for k, v in g.as_dict().items():
        print(f"{k:<6} {v:.4f}")


def cmd_iv(args):
    res = implied_vol(args.price, args.S, args.K, args.T, args.r, args.kind)
    if args.json:
        print(json.dumps(asdict(res), indent=2))
        return
    status = "converged" if res.converged else "NOT converged"
    print(f"{res.volatility:.6f}  ({status}, {res.iterations} iterations)")


def cmd_analyze(args):
    spot = args.spot
    if spot is None:
        quote = get_mock_quote(args.symbol)
        if quote is None:
            raise InvalidInputError(
                f"no quote for {args.symbol!r}; pass --spot "
                f"(mock symbols: {', '.join(MOCK_QUOTES)})"
            )
        spot = quote.price
        logger.info("using mock quote %s=%.2f", quote.symbol, spot)

    market = MarketParameters.from_dashboard(spot, args.rate_pct, args.vol_pct, args.days)
    strategy = strategy_from_template(args.template, market, underlying=args.symbol.upper())
    rng = PriceRange.around(spot, width=args.width, steps=args.steps)
    result = analyze(strategy, account_size=args.account, risk_pct=args.risk_pct,
                     price_range=rng)

    if args.json:
        out = asdict(result)
        if not args.curve:
            out.pop("curve")
        print(json.dumps(out, indent=2, default=str))
        return

    m = result.metrics
    print(f"{strategy.name} on {args.symbol.upper()} @ {spot:.2f}")
    print(f"  max profit      {m.max_profit:,.2f}"
          + ("  (unbounded above window)" if result.tail.unbounded_profit else ""))
    print(f"  max loss        {m.max_loss:,.2f}"
          + ("  (unbounded above window)" if result.tail.unbounded_loss else ""))
    print(f"  breakevens      {', '.join(f'{b:.2f}' for b in m.breakevens) or '-'}")
    print(f"  win rate        {m.probability_of_profit:.1f}%")
    print(f"  risk/reward     {_fmt(m.risk_reward_ratio)}")
    print(f"  position size   {result.position_size}")
    print("  greeks          " + "  ".join(
        f"{k}={v:.4f}" for k, v in result.total_greeks.as_dict().items()))
    a = result.assessment
    print(f"  risk used       {_fmt(a.utilization, '.1f')}% ({a.level})")
    for w in a.warnings:
        print(f"  ! {w}")


def cmd_templates(args):
    for t in STRATEGY_TEMPLATES:
        print(f"{t.id:<18} {t.category:<11} {t.name}")


def cmd_quote(args):
    q = get_mock_quote(args.symbol)
    if q is None:
        raise InvalidInputError(f"no mock quote for {args.symbol!r}")
    print(json.dumps(asdict(q), indent=2))


def main(argv=None):
    p = argparse.ArgumentParser(prog="optstrat", description="Options strategy analytics")
    p.add_argument("-v", "--verbose", action="count", default=0)
    sub = p.add_subparsers(dest="cmd", required=True)

    # Greeks
    p_g = sub.add_parser("greeks", help="Black-Scholes price and Greeks")
    add_common(p_g)
    p_g.add_argument("--sigma", type=float, required=True)
    p_g.add_argument("--json", action="store_true")
    p_g.set_defaults(func=cmd_greeks)

    # Implied vol
    p_iv = sub.add_parser("iv", help="implied volatility from a market price")
    add_common(p_iv)
    p_iv.add_argument("--price", type=float, required=True)
    p_iv.add_argument("--json", action="store_true")
    p_iv.set_defaults(func=cmd_iv)

    # Strategy analysis
    p_an = sub.add_parser("analyze", help="payoff, breakevens, risk and Greeks of a template")
    p_an.add_argument("--template", required=True,
                      choices=[t.id for t in STRATEGY_TEMPLATES])
    p_an.add_argument("--symbol", default="AAPL")
    p_an.add_argument("--spot", type=float, default=None,
                      help="underlying price (default: mock quote of --symbol)")
    p_an.add_argument("--rate-pct", dest="rate_pct", type=float, default=5.0)
    p_an.add_argument("--vol-pct", dest="vol_pct", type=float, default=25.0)
    p_an.add_argument("--days", type=float, default=30.0)
    p_an.add_argument("--account", type=float, default=DEFAULT_ACCOUNT_SIZE)
    p_an.add_argument("--risk-pct", dest="risk_pct", type=float, default=DEFAULT_RISK_PCT)
    p_an.add_argument("--width", type=float, default=0.3, help="window half-width")
    p_an.add_argument("--steps", type=int, default=100)
    p_an.add_argument("--json", action="store_true")
    p_an.add_argument("--curve", action="store_true", help="include curve in JSON")
    p_an.set_defaults(func=cmd_analyze)

    p_t = sub.add_parser("templates", help="list strategy templates")
    p_t.set_defaults(func=cmd_templates)

    p_q = sub.add_parser("quote", help="show a mock quote")
    p_q.add_argument("--symbol", required=True)
    p_q.set_defaults(func=cmd_quote)

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1 else
        logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except InvalidInputError as exc:
        logger.error("%s", exc)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
