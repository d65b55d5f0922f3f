#!/usr/bin/env python3
"""
Tax Return Analysis Demonstration

This script demonstrates the calculation and advisory workflow:
1. Build an engine with the built-in tax years
2. Calculate federal tax for a sample return
3. Generate ranked deduction recommendations
4. Evaluate a proposed itemizing strategy

Run: python examples/tax_return_demo.py
"""

from decimal import Decimal

from taxapp_core import (
    CreditData,
    DeductionData,
    FilingStatus,
    IncomeData,
    ItemizedDeduction,
    ItemizedDeductionCategory,
    ProposedDeduction,
    SelfEmploymentIncome,
    TaxCoreConfig,
    TaxReturn,
    WageIncome,
    configure_logging,
    create_tax_engine,
)


def create_sample_return() -> TaxReturn:
    """Create a sample return with wages, a side business and a few deductions."""
    return TaxReturn(
        id="demo-2024",
        tax_year=2024,
        filing_status=FilingStatus.MARRIED_FILING_JOINTLY,
        income=IncomeData(
            wages=[
                WageIncome(
                    employer_name="ABC Technology Inc.",
                    wages=Decimal("92000"),
                    federal_tax_withheld=Decimal("8400"),
                ),
            ],
            self_employment=[
                SelfEmploymentIncome(
                    business_name="Smith Design Studio",
                    gross_receipts=Decimal("24000"),
                    business_expenses=Decimal("6500"),
                    net_profit=Decimal("17500"),
                ),
            ],
        ),
        deductions=DeductionData(
            itemized_deductions=[
                ItemizedDeduction(
                    category=ItemizedDeductionCategory.MORTGAGE_INTEREST,
                    description="Primary residence mortgage",
                    amount=Decimal("14200"),
                ),
                ItemizedDeduction(
                    category=ItemizedDeductionCategory.STATE_LOCAL_TAXES,
                    description="Property and state income tax",
                    amount=Decimal("10000"),
                ),
            ],
        ),
        credits=CreditData(child_tax_credit=Decimal("4000")),
    )


def main():
    configure_logging(TaxCoreConfig(log_level="WARNING"))
    engine = create_tax_engine()

    print("=" * 70)
    print("TAXAPP CORE - Tax Return Analysis Demo")
    print("=" * 70)
    print()

    # Step 1: Build return
    print("Step 1: Creating sample return...")
    tax_return = create_sample_return()
    print(f"  - Tax Year: {tax_return.tax_year}")
    print(f"  - Filing Status: {tax_return.filing_status.value}")
    print(f"  - Wages: ${tax_return.income.total_wages:,.2f}")
    print(f"  - Business Profit: ${tax_return.income.total_self_employment_profit:,.2f}")
    print()

    # Step 2: Calculate
    print("Step 2: Calculating federal tax...")
    result = engine.calculator.compute(tax_return)
    print(f"  - Adjusted Gross Income: ${result.adjusted_gross_income:,.2f}")
    print(f"  - Taxable Income: ${result.taxable_income:,.2f}")
    print(f"  - Tax Before Credits: ${result.federal_tax_before_credits:,.2f}")
    print(f"  - Credits: ${result.total_credits:,.2f}")
    print(f"  - Self-Employment Tax: ${result.self_employment_tax:,.2f}")
    print(f"  - Total Liability: ${result.total_tax_liability:,.2f}")
    print(f"  - Refund: ${result.refund_amount:,.2f}")
    print(f"  - Amount Owed: ${result.amount_owed:,.2f}")
    print(f"  - Effective Rate: {result.effective_tax_rate:.2%}")
    print(f"  - Marginal Rate: {result.marginal_tax_rate:.0%}")
    for warning in result.warnings:
        print(f"  ! {warning}")
    print()

    # Step 3: Recommendations
    print("Step 3: Generating deduction recommendations...")
    analysis = engine.advisor.analyze(tax_return)
    verdict = analysis.standard_vs_itemized
    print(f"  - Deduction Method: {'itemized' if verdict.use_itemized else 'standard'}")
    print(f"  - Deduction Amount: ${verdict.deduction_amount:,.2f}")
    for rec in analysis.recommendations:
        print(
            f"  - [{rec.category.kind}:{rec.category.category.value}] "
            f"${rec.potential_savings:,.2f} ({rec.confidence:.0%}) {rec.description}"
        )
    print(f"  - Total Potential Savings: ${analysis.potential_savings:,.2f}")
    print()

    # Step 4: Strategy
    print("Step 4: Evaluating proposed deductions...")
    strategy = engine.advisor.analyze_deduction_strategy(
        tax_return,
        [ProposedDeduction(category="charitable_contributions", amount=Decimal("3000"))],
    )
    print(f"  - Current Tax: ${strategy.current_tax:,.2f}")
    print(f"  - New Tax: ${strategy.new_tax:,.2f}")
    print(f"  - Savings: ${strategy.savings:,.2f}")
    print(f"  - Recommendation: {strategy.recommendation.value}")

    print()
    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
