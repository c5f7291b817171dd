#!/usr/bin/env python3
"""
Cash Flow Foundation Demonstration

This script walks one month of the allocation workflow:
1. Run the working-capital waterfall for the business
2. Allocate the month's household inflow
3. Fund upcoming needs from this month's pool
4. Print the transfer checklist and action plan

Run: python examples/cashflow_demo.py --month 2026-02 --output plan.txt
"""

import argparse
import sys

from cashflow_core import (
    ToolName,
    build_dashboard,
    default_state,
    format_currency,
    fund_needs,
    render_instructions_text,
)
from cashflow_core.exceptions import ValidationError
from cashflow_core.months import normalize_month
from cashflow_session.config import CashflowConfig, configure_logging


def main():
    """Run the cash-flow demonstration."""
    parser = argparse.ArgumentParser(
        description="Show one month of the Cash Flow Foundation waterfall",
    )
    parser.add_argument(
        "--month", "-m",
        type=str,
        default="2026-01",
        help="Month to allocate as YYYY-MM (default: 2026-01)"
    )
    parser.add_argument(
        "--use-suggested-inflow",
        action="store_true",
        help="Use the waterfall's Family Office transfer as business inflow"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Also save the plain-text instructions to this file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show the calculators' step-by-step log"
    )
    args = parser.parse_args()

    configure_logging(CashflowConfig(log_level="INFO" if args.verbose else "WARNING"))

    try:
        month = normalize_month(args.month)
    except ValidationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("=" * 70)
    print("CASH FLOW FOUNDATION - Monthly Allocation Demo")
    print("=" * 70)
    print()

    # Step 1: Sample household
    state = default_state()
    state.current_month = month
    wc = state.working_capital
    wc.operating_expenses_per_month = "55000"
    wc.inventory_cost_per_month = "0"
    wc.days_per_month = "30"
    wc.avg_collection_days = "30"
    wc.business_checking_balance = "125000"
    wc.reserve_account_balance = "75000"
    wc.buffer_days = "45"
    wc.reserve_days = "45"

    print("Step 1: Working-capital waterfall...")
    snapshot = build_dashboard(state)
    waterfall = snapshot.working_capital
    print(f"  - Monthly spend: {format_currency(waterfall.monthly_spend)}")
    print(f"  - Business buffer goal: {format_currency(waterfall.working_capital_goal)}")
    print(f"  - Reserve goal: {format_currency(waterfall.reserve_goal)}")
    print(f"  - Move to reserve: {format_currency(waterfall.move_to_reserve)}")
    print(f"  - Move to Family Office: {format_currency(waterfall.move_to_family_office)}")
    for warning in waterfall.warnings:
        print(f"  ! {warning}")
    print()

    if args.use_suggested_inflow:
        state.apply_suggested_business_inflow()
        snapshot = build_dashboard(state)

    # Step 2: Allocation
    print(f"Step 2: Allocating inflow for {month}...")
    cashflow = snapshot.cashflow
    print(f"  - Total inflow: {format_currency(cashflow.total_inflow)}")
    print(f"  - Giving: {format_currency(cashflow.giving_transfer_amount)}")
    print(f"  - Lifestyle: {format_currency(cashflow.lifestyle_transfer_amount)}")
    print(f"  - Needs pool: {format_currency(cashflow.allocated_to_needs_this_month)}")
    print(f"  - Excess: {format_currency(cashflow.excess)}")
    print()

    # Step 3: Fund needs
    print("Step 3: Funding upcoming needs, earliest due first...")
    funding = fund_needs(state.cashflow, month, pool=cashflow.allocated_to_needs_this_month)
    for allocation in funding.allocations:
        print(
            f"  - {allocation.name}: +{format_currency(allocation.added)} "
            f"(funded {format_currency(allocation.funded_after)})"
        )
    if not funding.allocations:
        print("  - Nothing due within the next six months")
    print()

    # Step 4: Checklist
    state.transfer_done.set_done(month, ToolName.CASHFLOW, "giving")
    snapshot = build_dashboard(state)
    print("Step 4: Transfer checklist")
    for item in snapshot.cashflow_checklist:
        mark = "x" if item.done else " "
        t = item.instruction
        print(f"  [{mark}] {t.step}. {t.destination}: {format_currency(t.amount)}")
    print()

    report_text = render_instructions_text(snapshot.cashflow, state.accounts)
    print(report_text)

    if args.output:
        with open(args.output, "w") as f:
            f.write(report_text)
        print()
        print(f"  - Saved: {args.output}")

    print()
    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
