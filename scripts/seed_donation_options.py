"""
Seed the donation options shown on the donate page.

Replaces every existing option with the standard catalogue:
- Contribution levels (Friend, Supporter, Sustainer)
- Memberships
- Sponsorships

Usage:
    python scripts/seed_donation_options.py
"""

import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path so we can import from repositories
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.donation import DonationOptionType
from repositories.client import execute, get_supabase
from repositories.donation_option_repository import create_option

CONTRIBUTION = DonationOptionType.CONTRIBUTION
MEMBERSHIP = DonationOptionType.MEMBERSHIP
SPONSORSHIP = DonationOptionType.SPONSORSHIP

OPTIONS = [
    ("Friend", "$25", 25, CONTRIBUTION),
    ("Friend", "$50", 50, CONTRIBUTION),
    ("Friend", "$100", 100, CONTRIBUTION),
    ("Friend", "$250", 250, CONTRIBUTION),
    ("Supporter", "$500", 500, CONTRIBUTION),
    ("Supporter", "$1,000", 1000, CONTRIBUTION),
    ("Supporter", "$2,500", 2500, CONTRIBUTION),
    ("Sustainer", "$5,000", 5000, CONTRIBUTION),
    ("Sustainer", "$10,000", 10000, CONTRIBUTION),
    ("Membership", "Family Membership", 100, MEMBERSHIP),
    ("Membership", "Organizational Membership", 250, MEMBERSHIP),
    ("Sponsorship", "Class/Workshop Sponsorship", 1000, SPONSORSHIP),
    ("Sponsorship", "Program Sponsorship", 5000, SPONSORSHIP),
    ("Sponsorship", "Special Events Sponsorship", 10000, SPONSORSHIP),
]


def seed_donation_options():
    """Delete all options and insert the standard catalogue in display order."""

    # PostgREST refuses an unfiltered delete; match every row instead.
    execute(
        get_supabase().table("donation_options").delete().neq("label", ""),
        "clear donation options",
    )

    for order, (group, label, amount, option_type) in enumerate(OPTIONS, start=1):
        option = create_option(
            {
                "group": group,
                "label": label,
                "amount": Decimal(amount),
                "type": option_type,
                "order": order,
            }
        )
        print(f"  {order:2d}. {option.group:<12} {option.label:<28} ${option.amount}")

    print(f"[SUCCESS] Seeded {len(OPTIONS)} donation options")


if __name__ == "__main__":
    seed_donation_options()
