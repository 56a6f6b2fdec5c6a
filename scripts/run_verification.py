"""Prove the matching and ledger invariants with Z3.

Exits with status 1 if any property has a counterexample or the solver
gives up, so the script can gate a CI job.
"""

from __future__ import annotations

import argparse
import sys

from merkelrex.verification.properties import AREAS, ExchangeVerifier, VerificationResult


def report_area(area: str, results: list[VerificationResult]) -> int:
    """Print one area's results and return how many failed."""
    failed = [r for r in results if not r.holds]
    print(f"\n[{area}] {len(results) - len(failed)}/{len(results)} proved")
    for r in results:
        mark = "ok  " if r.holds else "FAIL"
        print(f"  {mark} {r.property_name:<28} {r.solver_time_ms:8.1f}ms")
        if not r.holds:
            print(f"       {r.description}")
            for var, value in sorted((r.counterexample or {}).items()):
                print(f"       {var} = {value}")
    return len(failed)


def main() -> int:
    parser = argparse.ArgumentParser(description="Verify exchange invariants with Z3")
    parser.add_argument(
        "--area", choices=sorted(AREAS), action="append",
        help="Restrict to one area (repeatable); all areas by default",
    )
    args = parser.parse_args()

    verifier = ExchangeVerifier()
    areas = args.area or list(AREAS)

    n_failed = sum(report_area(area, verifier.verify_area(area)) for area in areas)

    print()
    if n_failed:
        print(f"{n_failed} propert{'y' if n_failed == 1 else 'ies'} not proved")
        return 1
    print("All properties proved")
    return 0


if __name__ == "__main__":
    sys.exit(main())
