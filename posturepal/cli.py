"""
PosturePal command line client.

Usage:
    posturepal track --duration 60
    posturepal track --duration 300 --sync
    posturepal history --limit 10
    posturepal stats --weekly
    posturepal settings --sensitivity 0.9
    posturepal profile --name Ada --age 36 --goal posture_correction
    posturepal login --email ada@example.com --password secret1
"""
import argparse
import asyncio
import random
import sys
from typing import List, Optional

from posturepal.client.api_client import ApiError, PosturePalClient
from posturepal.client.config import get_client_settings
from posturepal.client.local_store import LocalStore, LocalStoreError
from posturepal.client.tracking import TrackingLoop
from posturepal.core.logging import configure_logging
from posturepal.schemas.profile import (
    FitnessGoal,
    Gender,
    ProfileResponse,
    SettingsUpdate,
)
from posturepal.services.posture_analyzer import MockPostureAnalyzer, PostureSample
from posturepal.services.session_tracker import SessionTracker, TrackedSession
from posturepal.services.stats_calculator import format_duration


def print_status(sample: PostureSample, session: TrackedSession) -> None:
    label = "GOOD" if sample.is_good else "POOR"
    line = (
        f"[{format_duration(session.total_time):>8}] {label} score={sample.score:3d} "
        f"avg={session.average_score:3d} good={format_duration(session.good_posture_time)}"
    )
    if sample.issues:
        line += "  " + "; ".join(f"{i.message} ({i.severity.value})" for i in sample.issues)
    print(line)


def print_session_summary(session: TrackedSession) -> None:
    print("=" * 60)
    print(f"Session {session.id}")
    print(f"  Duration:      {format_duration(session.total_time)}")
    print(f"  Good posture:  {format_duration(session.good_posture_time)}")
    print(f"  Average score: {session.average_score}")
    print(f"  Issues:        {len(session.issues)}")
    print("=" * 60)


def print_dashboard(stats: dict, title: str) -> None:
    print(title)
    print("-" * 40)
    print(f"  Sessions:         {stats['total_sessions']}")
    print(f"  Total time:       {format_duration(stats['total_time'])}")
    print(f"  Good posture:     {format_duration(stats['total_good_posture_time'])} ({stats['posture_percentage']}%)")
    print(f"  Average score:    {stats['average_score']}")
    print(f"  Best / worst:     {stats['best_score']:g} / {stats['worst_score']:g}")


def cmd_track(args, store: LocalStore) -> int:
    client_settings = get_client_settings()
    detector = MockPostureAnalyzer(rng=random.Random(args.seed) if args.seed is not None else None)

    api_client = None
    if args.sync:
        token = args.token or client_settings.token
        if not token:
            print("--sync needs a token (--token or POSTUREPAL_TOKEN)", file=sys.stderr)
            return 2
        api_client = PosturePalClient(client_settings.api_url, token=token, timeout=client_settings.request_timeout)

    loop = TrackingLoop(
        detector=detector,
        tracker=SessionTracker(),
        store=store,
        api_client=api_client,
        interval=args.interval or client_settings.tick_seconds,
        on_update=None if args.quiet else print_status,
        on_reminder=lambda message: print(f"*** {message}"),
    )
    loop.apply_settings(store.get_settings_or_default())

    print(f"Tracking for {format_duration(args.duration)} (Ctrl+C to stop early)...")
    session = asyncio.run(_track(loop, args.duration))

    if session is not None:
        print_session_summary(session)
    for warning in loop.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    return 0


async def _track(loop: TrackingLoop, duration: float) -> Optional[TrackedSession]:
    loop.start()
    try:
        await asyncio.sleep(duration)
    except asyncio.CancelledError:
        pass
    return await loop.stop()


def cmd_history(args, store: LocalStore) -> int:
    sessions = store.list_sessions(limit=args.limit)
    if not sessions:
        print("No sessions recorded yet.")
        return 0

    print(f"{'Started':<20} {'Duration':>9} {'Good':>9} {'Score':>6} {'Issues':>7}  Id")
    for session in sessions:
        print(
            f"{session.start_time.strftime('%Y-%m-%d %H:%M'):<20} "
            f"{format_duration(session.total_time):>9} "
            f"{format_duration(session.good_posture_time):>9} "
            f"{session.average_score:>6} {len(session.issues):>7}  {session.id}"
        )
    return 0


def cmd_stats(args, store: LocalStore) -> int:
    if args.weekly:
        print_dashboard(store.weekly_stats(), "Last 7 days")
    else:
        print_dashboard(store.stats(), "All time")
    return 0


def cmd_settings(args, store: LocalStore) -> int:
    update = SettingsUpdate(
        reminder_interval=args.reminder_interval,
        sensitivity=args.sensitivity,
        enable_reminders=args.reminders,
        enable_camera=args.camera,
    )
    if update.model_dump(exclude_none=True):
        current = store.update_settings(update)
    else:
        current = store.get_settings_or_default()

    for key, value in current.model_dump().items():
        print(f"  {key}: {value}")
    return 0


def cmd_profile(args, store: LocalStore) -> int:
    changes = {
        "name": args.name,
        "age": args.age,
        "gender": args.gender,
        "height": args.height,
        "weight": args.weight,
        "fitness_goal": args.goal,
    }
    changes = {key: value for key, value in changes.items() if value is not None}

    profile = store.get_profile()
    if changes:
        base = profile.model_dump() if profile else {}
        profile = ProfileResponse.model_validate({**base, **changes})
        store.save_profile(profile)
        profile = store.get_profile()

    if profile is None:
        print("No profile yet. Set one with --name/--age/--gender/--height/--weight/--goal.")
        return 0

    for key, value in profile.model_dump(mode="json").items():
        print(f"  {key}: {value}")
    return 0


def cmd_delete(args, store: LocalStore) -> int:
    if store.delete_session(args.session_id):
        print(f"Deleted session {args.session_id}")
        return 0
    print(f"Session {args.session_id} not found", file=sys.stderr)
    return 1


def cmd_clear(args, store: LocalStore) -> int:
    if args.all:
        store.clear_all_data()
        print("Deleted profile, settings and all sessions.")
    else:
        count = store.clear_all_sessions()
        print(f"Deleted {count} sessions.")
    return 0


def cmd_login(args, store: LocalStore) -> int:
    client_settings = get_client_settings()
    client = PosturePalClient(client_settings.api_url, timeout=client_settings.request_timeout)
    user = client.login(args.email, args.password)
    print(f"Logged in as {user['name']} <{user['email']}>")
    print(f"export POSTUREPAL_TOKEN={client.token}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="posturepal", description="Posture tracking client")
    parser.add_argument("--db", help="local database file (default: POSTUREPAL_LOCAL_DB)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING...")
    sub = parser.add_subparsers(dest="command", required=True)

    track = sub.add_parser("track", help="run a tracking session")
    track.add_argument("--duration", type=float, default=60, help="seconds to track")
    track.add_argument("--interval", type=float, default=None, help="seconds between samples")
    track.add_argument("--seed", type=int, default=None, help="seed the mock detector")
    track.add_argument("--sync", action="store_true", help="upload the finished session")
    track.add_argument("--token", default=None, help="API token for --sync")
    track.add_argument("--quiet", action="store_true", help="only print the summary")
    track.set_defaults(func=cmd_track)

    history = sub.add_parser("history", help="list recorded sessions")
    history.add_argument("--limit", type=int, default=20)
    history.set_defaults(func=cmd_history)

    stats = sub.add_parser("stats", help="show aggregate statistics")
    stats.add_argument("--weekly", action="store_true", help="only the last 7 days")
    stats.set_defaults(func=cmd_stats)

    settings = sub.add_parser("settings", help="show or update tracking settings")
    settings.add_argument("--reminder-interval", type=int, default=None, help="minutes")
    settings.add_argument("--sensitivity", type=float, default=None, help="0.1 - 1.0")
    settings.add_argument("--reminders", action=argparse.BooleanOptionalAction, default=None)
    settings.add_argument("--camera", action=argparse.BooleanOptionalAction, default=None)
    settings.set_defaults(func=cmd_settings)

    profile = sub.add_parser("profile", help="show or update the profile")
    profile.add_argument("--name")
    profile.add_argument("--age", type=int)
    profile.add_argument("--gender", choices=[g.value for g in Gender])
    profile.add_argument("--height", type=float, help="cm")
    profile.add_argument("--weight", type=float, help="kg")
    profile.add_argument("--goal", choices=[g.value for g in FitnessGoal])
    profile.set_defaults(func=cmd_profile)

    delete = sub.add_parser("delete", help="delete one session")
    delete.add_argument("session_id")
    delete.set_defaults(func=cmd_delete)

    clear = sub.add_parser("clear", help="delete all sessions")
    clear.add_argument("--all", action="store_true", help="also delete profile and settings")
    clear.set_defaults(func=cmd_clear)

    login = sub.add_parser("login", help="get an API token")
    login.add_argument("--email", required=True)
    login.add_argument("--password", required=True)
    login.set_defaults(func=cmd_login)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    client_settings = get_client_settings()
    configure_logging(args.log_level or client_settings.log_level)

    try:
        store = LocalStore(args.db or client_settings.local_db)
    except LocalStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        return args.func(args, store)
    except (ApiError, LocalStoreError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Invalid value: {e}", file=sys.stderr)
        return 2
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
