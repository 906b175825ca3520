"""
API walkthrough against a running server.
Registers a throwaway account, records a short simulated session, syncs it
and prints what the server returns at every step.

    python scripts/api_smoke.py --url http://localhost:8000
"""
import argparse
import json
import uuid

from posturepal.client.api_client import ApiError, PosturePalClient
from posturepal.services.posture_analyzer import MockPostureAnalyzer
from posturepal.services.session_tracker import SessionTracker


def print_step(title, data):
    print(f"\n{title}")
    print(json.dumps(data, indent=2, default=str))
    print("-" * 80)


def run_walkthrough(client: PosturePalClient):
    email = f"smoke-{uuid.uuid4().hex[:8]}@example.com"

    user = client.register("Smoke Test", email, "password123", age=30, fitness_goal="posture_correction")
    print_step("1. Register", user)

    print_step("2. Current account", client.me())
    print_step("3. Update settings", client.update_settings(sensitivity=0.9))

    tracker = SessionTracker()
    detector = MockPostureAnalyzer()
    tracker.start()
    for _ in range(5):
        tracker.tick(detector.analyze_frame())
    session = tracker.stop()

    created = client.create_session(session)
    print_step("4. Create session", created)

    print_step("5. List sessions", client.list_sessions(limit=5))
    print_step("6. Statistics", client.get_stats())

    print_step("7. Delete session", {"deleted": client.delete_session(created["id"])})
    print_step("8. Delete again", {"deleted": client.delete_session(created["id"])})

    client.delete_all_data()
    print_step("9. Statistics after wipe", client.get_stats())


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Walk through the PosturePal API")
    parser.add_argument("--url", default="http://localhost:8000")
    args = parser.parse_args()

    print("=" * 80)
    print("POSTUREPAL API WALKTHROUGH")
    print("=" * 80)
    try:
        run_walkthrough(PosturePalClient(args.url))
    except ApiError as e:
        print(f"\nError: {e}")
        if e.status_code is None:
            print(f"Please make sure the server is running at {args.url}")
    else:
        print("\nWalkthrough completed")
