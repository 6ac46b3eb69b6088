#!/usr/bin/env python3
"""
Application Wizard Demonstration

This script walks an application through the validation engine:
1. Add a main applicant and fill in step 1
2. Answer the income questions and watch derived values appear
3. Fill in the self-help ledger and compare it with the financing step
4. Attempt to submit each step and print the messages an applicant would see

Run: python examples/application_demo.py
"""

from datetime import date

from foerder_core import Change, ValidationEngine, WizardStep, add_applicant
from foerder_core.messages import render
from foerder_core.models import ApplicationRecord, CostLedgerEntry, Person, Title


def print_result(result, step: WizardStep) -> None:
    print(f"  - Blocks submit: {result.blocks_submit(step)}")
    print(f"  - Completion: {result.completion(step)}%")
    for section in result.for_step(step):
        for error in section.errors:
            print(f"    [{section.title}] {render(error)}")


def main():
    """Run the application wizard demonstration."""
    print("=" * 70)
    print("FOERDER CORE - Application Wizard Demo")
    print("=" * 70)
    print()

    engine = ValidationEngine(today=date(2024, 5, 15))

    # Step 1: Applicant
    print("Step 1: Adding the main applicant...")
    record = add_applicant(
        ApplicationRecord(),
        Person(title=Title.FRAU, first_name="Erika", last_name="Musterfrau", birth_date="1975-03-02"),
    )
    result = engine.evaluate(engine.derive(record))
    main = result.record.personal_info.persons[0]
    print(f"  - Main applicant: {main.first_name} {main.last_name} ({main.role})")
    result = engine.activate(result.record, WizardStep.PERSONAL_INFO, previous=result)
    print_result(result, WizardStep.PERSONAL_INFO)
    print()

    # Step 2: Income declaration
    print("Step 2: Declaring employment income...")
    result = engine.apply_change(
        result.record,
        Change(path="income_declaration.declarations.0.has_employment_income", value=True),
        previous=result,
    )
    employment = result.record.income_declaration.declarations[0].employment
    print(f"  - Default window anchor: {employment.anchor_month + 1}/{employment.anchor_year}")
    print(f"  - Re-evaluated sections: {', '.join(result.reevaluated)}")
    result = engine.activate(result.record, WizardStep.INCOME_DECLARATION, previous=result)
    print_result(result, WizardStep.INCOME_DECLARATION)
    print()

    # Step 3: Self-help
    print("Step 3: Filling in the self-help ledger...")
    for change in (
        Change(path="self_help.will_provide_self_help", value=True),
        Change(path="self_help.main_applicant_will_help", value=False),
        Change(path="financing.declared_self_help", value="4.500,00"),
        Change(
            path="self_help.entries",
            value=(
                CostLedgerEntry(category="erdarbeiten", material="2.000", labor="3.000", self_help="2.500,00"),
                CostLedgerEntry(category="elektro", material="800", labor="1.200", self_help="1.500,00"),
            ),
        ),
    ):
        result = engine.apply_change(result.record, change, previous=result)
    totals = result.record.self_help.totals
    print(f"  - Ledger self-help total: {totals.self_help / 100:,.2f} EUR")
    result = engine.activate(result.record, WizardStep.SELF_HELP, previous=result)
    print_result(result, WizardStep.SELF_HELP)
    print()

    print("-" * 70)
    print("All visible messages:")
    for message in result.messages:
        print(f"  * {message}")

    print()
    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
