"""CLI entry point for the deployment cost engine."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime

from mobility.core.config import Settings
from mobility.core.db import (
    init_db,
    insert_calculation_run,
    insert_optimization_run,
    load_social_security_settings,
    save_social_security_settings,
)
from mobility.core.schemas import Assignment, CostResult, ProjectDemand, ScoringWeights
from mobility.costing.aggregator import calculate_deployment_cost
from mobility.costing.exchange import ExchangeRateCache, StaticExchangeRateProvider
from mobility.rules.jurisdictions import JurisdictionTable
from mobility.staffing.optimizer import (
    OptimizationResult,
    export_results_json,
    optimize_team,
    resolve_weights,
)
from mobility.staffing.roster import load_roster


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (built-in defaults when omitted)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    parser = argparse.ArgumentParser(
        description="Deployment cost engine - assignment costs and staffing optimization",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- calculate subcommand ---
    calc_parser = subparsers.add_parser(
        "calculate", parents=[common], help="Calculate the cost of one assignment",
    )
    calc_parser.add_argument("--home", required=True, help="Home country code (e.g. Finland)")
    calc_parser.add_argument("--host", required=True, help="Host country code (e.g. Brazil)")
    calc_parser.add_argument("--salary", type=float, required=True, help="Monthly salary (EUR)")
    calc_parser.add_argument("--months", type=int, default=1, help="Duration in months")
    calc_parser.add_argument(
        "--working-days", type=int, default=22, help="Working days per month (default: 22)",
    )
    calc_parser.add_argument(
        "--allowance", type=float, default=None,
        help="Daily allowance in EUR (per diem table when omitted)",
    )
    calc_parser.add_argument("--city", default=None, help="Host city for per diem overrides")
    calc_parser.add_argument(
        "--exchange-rate", type=float, default=None,
        help="EUR -> host currency rate (cached rate when omitted)",
    )
    calc_parser.add_argument(
        "--display-currency", default=None, help="Also show totals in this currency",
    )
    calc_parser.add_argument(
        "--display-rate", type=float, default=None,
        help="Rate for --display-currency (cached rate when omitted)",
    )
    calc_parser.add_argument("--export", choices=["json"], help="Export result to format (json)")
    calc_parser.add_argument("--save", action="store_true", help="Record the run in the database")

    # --- optimize subcommand ---
    opt_parser = subparsers.add_parser(
        "optimize", parents=[common], help="Rank candidates and select a team",
    )
    opt_parser.add_argument("--destination", required=True, help="Destination country/region")
    opt_parser.add_argument("--role", required=True, help="Role to staff")
    opt_parser.add_argument("--months", type=int, default=1, help="Project duration in months")
    opt_parser.add_argument("--positions", type=int, default=1, help="Positions to fill")
    opt_parser.add_argument(
        "--skills", default="", help="Comma-separated required skills",
    )
    opt_parser.add_argument(
        "--preset", default=None, help="Scoring preset (cost, speed, compliance)",
    )
    opt_parser.add_argument(
        "--weights", default=None,
        help="Explicit weights as cost,speed,compliance (overrides --preset)",
    )
    opt_parser.add_argument(
        "--roster", default=None, help="Roster YAML (built-in sample when omitted)",
    )
    opt_parser.add_argument("--export", choices=["json"], help="Export results to format (json)")
    opt_parser.add_argument("--save", action="store_true", help="Record the run in the database")

    # --- ss-settings subcommand ---
    ss_parser = subparsers.add_parser(
        "ss-settings", parents=[common], help="Show or change social security inclusion settings",
    )
    ss_parser.add_argument(
        "--include-when-treaty", action=argparse.BooleanOptionalAction, default=None,
        help="Include host social security when a treaty applies",
    )
    ss_parser.add_argument(
        "--include-when-no-treaty", action=argparse.BooleanOptionalAction, default=None,
        help="Include host social security when no treaty applies",
    )

    # --- screen subcommand ---
    screen_parser = subparsers.add_parser(
        "screen", parents=[common], help="Screen a move request before cost analysis",
    )
    screen_parser.add_argument("--request", required=True, help="Path to move request YAML")
    screen_parser.add_argument("--llm", action="store_true", help="Use LLM screening")
    screen_parser.add_argument(
        "--provider",
        default=None,
        choices=["anthropic", "openai", "gemini", "ollama"],
        help="LLM provider (default: from settings)",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    return Settings() if path is None else Settings.from_yaml(path)


def load_table(settings: Settings) -> JurisdictionTable:
    if settings.jurisdictions_path:
        return JurisdictionTable.from_yaml(settings.jurisdictions_path)
    return JurisdictionTable.default()


def build_rate_cache(settings: Settings, table: JurisdictionTable) -> ExchangeRateCache:
    fallback = table.fallback_rates()
    provider = StaticExchangeRateProvider(fallback, source=settings.exchange.source)
    return ExchangeRateCache(
        provider, fallback=fallback, refresh_hours=settings.exchange.refresh_hours,
    )


def parse_weights(raw: str | None) -> ScoringWeights | None:
    if raw is None:
        return None
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 3:
        msg = f"--weights expects cost,speed,compliance, got '{raw}'"
        raise ValueError(msg)
    cost, speed, compliance = (float(p) for p in parts)
    return ScoringWeights(cost=cost, speed=speed, compliance=compliance)


def print_cost(result: CostResult) -> None:
    tax = result.tax
    ss = result.social_security
    status = "resident" if result.is_resident else "non-resident"
    print(f"\n{result.home_country} -> {result.host_name}, "
          f"{result.duration_months} months ({status})")
    print(f"  Gross salary:     {result.gross_salary:>12,.2f} EUR")
    print(f"  Per diem:         {result.per_diem:>12,.2f} EUR "
          f"({result.daily_allowance:.2f}/day, {result.per_diem_source})")
    print(f"  Admin fees:       {result.admin_fees.total:>12,.2f} EUR")
    print(f"  Tax:              {tax.tax_eur:>12,.2f} EUR ({tax.method}, "
          f"effective {tax.effective_rate:.1%})")
    if ss.included:
        print(f"  Social security:  {ss.total:>12,.2f} EUR "
              f"(employer {ss.employer:,.2f}, employee {ss.employee:,.2f})")
    else:
        print(f"  Social security:  {0:>12,.2f} EUR ({ss.exclusion_reason})")
    print(f"  Additional cost:  {result.additional_cost:>12,.2f} EUR")
    print(f"  Grand total:      {result.grand_total:>12,.2f} EUR")
    print(f"  Cost per day:     {result.cost_per_day:>12,.2f} EUR")
    if result.display is not None:
        d = result.display
        print(f"  Grand total ({d.currency}): {d.grand_total:,.2f} at {d.rate}")


def print_optimization(result: OptimizationResult) -> None:
    selection = result.selection
    agg = selection.aggregates
    print(f"\n{result.demand.role} x{result.demand.positions} at {result.demand.destination}: "
          f"{result.qualified_count} qualified")
    for s in selection.selected_team:
        print(f"  [team] {s.candidate.name or s.candidate_id:<20} score {s.final_score:>5.0f} "
              f"(speed {s.speed_score:.0f}, cost {s.cost_score:.0f}, "
              f"compliance {s.compliance_score:.0f})")
        for risk in s.risks:
            print(f"         ! {risk}")
    for s in selection.available_alternatives:
        print(f"  [alt]  {s.candidate.name or s.candidate_id:<20} score {s.final_score:>5.0f}")
    print(f"  Team cost {agg.total_cost:,.2f} EUR, slowest visa {agg.max_visa_days} days, "
          f"mean compliance {agg.mean_compliance:.1f}, mean score {agg.mean_overall:.1f}")


def cmd_calculate(args: argparse.Namespace, settings: Settings) -> None:
    """Handle calculate subcommand."""
    table = load_table(settings)
    conn = init_db(settings.database.path)
    ss_settings = load_social_security_settings(conn)
    rates = build_rate_cache(settings, table)

    host = table.get(args.host)
    exchange_rate = args.exchange_rate
    if exchange_rate is None and host is not None:
        exchange_rate = rates.rate_for(host.currency)
    display_rate = args.display_rate
    if args.display_currency and display_rate is None:
        display_rate = rates.rate_for(args.display_currency)

    assignment = Assignment(
        home_country=args.home,
        host_country=args.host,
        monthly_salary=args.salary,
        duration_months=args.months,
        working_days_per_month=args.working_days,
        daily_allowance=args.allowance,
        city=args.city,
    )
    result = calculate_deployment_cost(
        assignment,
        table,
        ss_settings=ss_settings,
        admin_fees=settings.admin_fees,
        exchange_rate=exchange_rate,
        display_currency=args.display_currency,
        display_rate=display_rate,
    )

    if args.export == "json":
        print(result.model_dump_json(indent=2))
    else:
        print_cost(result)

    if args.save:
        run_id = insert_calculation_run(conn, result)
        print(f"Saved calculation run #{run_id}")
    conn.close()


def cmd_optimize(args: argparse.Namespace, settings: Settings) -> None:
    """Handle optimize subcommand."""
    weights = resolve_weights(args.preset, parse_weights(args.weights), settings.presets)
    demand = ProjectDemand(
        destination=args.destination,
        role=args.role,
        duration_months=args.months,
        positions=args.positions,
        required_skills=[s for s in args.skills.split(",") if s.strip()],
    )
    candidates = load_roster(args.roster)

    started_at = datetime.now()
    result = asyncio.run(optimize_team(demand, candidates, weights, config=settings.scoring))
    finished_at = datetime.now()

    if args.export == "json":
        print(export_results_json(result))
    else:
        print_optimization(result)

    if args.save:
        conn = init_db(settings.database.path)
        run_id = insert_optimization_run(
            conn,
            destination=demand.destination,
            role=demand.role,
            positions=demand.positions,
            weights=weights.model_dump(),
            ranked_count=len(result.ranked),
            selected_ids=[s.candidate_id for s in result.selection.selected_team],
            started_at=started_at,
            finished_at=finished_at,
        )
        print(f"Saved optimization run #{run_id}")
        conn.close()


def cmd_ss_settings(args: argparse.Namespace, settings: Settings) -> None:
    """Handle ss-settings subcommand."""
    conn = init_db(settings.database.path)
    current = load_social_security_settings(conn)
    updates = {
        key: value
        for key, value in (
            ("include_when_treaty", args.include_when_treaty),
            ("include_when_no_treaty", args.include_when_no_treaty),
        )
        if value is not None
    }
    if updates:
        current = current.model_copy(update=updates)
        save_social_security_settings(conn, current)
        print("Social security settings updated.")
    print(f"  Include when treaty applies:    {current.include_when_treaty}")
    print(f"  Include when no treaty applies: {current.include_when_no_treaty}")
    conn.close()


def cmd_screen(args: argparse.Namespace, settings: Settings) -> None:
    """Handle screen subcommand."""
    from mobility.screening.schema import MoveRequest
    from mobility.screening.screener import screen_move

    request = MoveRequest.from_yaml(args.request)
    config = settings.screening
    if args.llm or args.provider:
        config = config.model_copy(
            update={"llm_enabled": True, "llm_provider": args.provider or config.llm_provider},
        )

    host = load_table(settings).get(request.host_country)
    treaty = host.treaty_with(request.home_country) if host is not None else False
    result = screen_move(request, config, treaty=treaty)

    print(f"\nDecision: {result.decision.upper()} "
          f"({result.confidence}% confidence, {result.source})")
    print(f"  {result.reasoning}")
    for flag in result.flags:
        print(f"  ! {flag}")


_COMMANDS = {
    "calculate": cmd_calculate,
    "optimize": cmd_optimize,
    "ss-settings": cmd_ss_settings,
    "screen": cmd_screen,
}


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        _COMMANDS[args.command](args, settings)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
