from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from eligibility import SPORTS_LIST, academy_search_query, criteria_for, evaluate_eligibility


def sample_ages(sport: str) -> list[int]:
    criteria = criteria_for(sport)
    low, high = int(criteria["min"]), int(criteria["max"])
    return sorted({low - 1, low, (low + high) // 2, high, high + 1})


def main() -> None:
    sports = sys.argv[1:] or SPORTS_LIST
    for sport in sports:
        print(f"\n=== {sport} ===")
        for age in sample_ages(sport):
            verdict = evaluate_eligibility(sport, age)
            if verdict.eligible:
                print(f"age {age:>2}: {verdict.category} -> {verdict.competitions}")
                print(f"         search: {academy_search_query(sport, 'Pune', 'Maharashtra', verdict.category)}")
            else:
                print(f"age {age:>2}: {verdict.status}")


if __name__ == "__main__":
    main()
