"""
Create a demo event for testing bookings end to end.

The event is paid ($25 per ticket) with a capacity of 50, so it can be used
to exercise the booking flow, capacity checks and webhooks.

Usage:
    python scripts/create_demo_event.py
"""

import sys
from pathlib import Path

# Add parent directory to path so we can import from repositories
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.money import parse_ticket_cost
from repositories.event_repository import create_event, list_events

DEMO_EVENT_TITLE = "Community Recovery Workshop (Demo)"


def create_demo_event():
    """Create the demo event unless an active one already exists."""

    existing = [event for event in list_events() if event.title == DEMO_EVENT_TITLE]
    if existing:
        print(f"Demo event already exists: {existing[0].event_id}")
        return

    cost = "$25"
    event = create_event(
        {
            "title": DEMO_EVENT_TITLE,
            "date": "2026-12-05",
            "time": "10:00 AM - 2:00 PM",
            "place": "Community Center, Main Hall",
            "desc": "A hands-on workshop for families and volunteers.",
            "action_type": "Buy Tickets",
            "cost": cost,
            "ticket_cost": parse_ticket_cost(cost),
            "capacity": 50,
            "highlights": ["Guest speakers", "Lunch included"],
            "special_gift": "Welcome kit for every attendee",
        }
    )

    print("[SUCCESS] Demo event created successfully!")
    print(f"  Event ID: {event.event_id}")
    print(f"  Title: {event.title}")
    print(f"  Ticket price: {event.cost} (capacity {event.capacity})")


if __name__ == "__main__":
    create_demo_event()
