"""
Tracking Loop

Drives detector -> tracker on a fixed period as a single asyncio task.
Each iteration sleeps for the interval and then applies exactly one tick,
so ticks never overlap and land in wall-clock order. stop() cancels the
task and finalizes the session.
"""
import asyncio
import logging
from typing import Callable, Optional

from posturepal.client.api_client import ApiError, PosturePalClient
from posturepal.client.local_store import LocalStore, LocalStoreError
from posturepal.schemas.profile import SettingsResponse
from posturepal.services.posture_analyzer import PostureDetector, PostureSample
from posturepal.services.session_tracker import SessionTracker, TrackedSession

logger = logging.getLogger(__name__)

REMINDER_MESSAGE = "Time for a posture check: sit back, shoulders down, screen at eye level."

UpdateCallback = Callable[[PostureSample, TrackedSession], None]
ReminderCallback = Callable[[str], None]


class TrackingLoop:
    """
    Owns one detector, one tracker and the periodic task feeding them.

    Args:
        detector: Source of posture samples
        tracker: Session accumulator
        store: Local store finished sessions are saved to
        api_client: Authenticated client finished sessions are synced to
        interval: Seconds between ticks
        on_update: Called after every tick with the sample and session
        on_reminder: Called with a message when a reminder is due
    """

    def __init__(
        self,
        detector: PostureDetector,
        tracker: SessionTracker,
        store: Optional[LocalStore] = None,
        api_client: Optional[PosturePalClient] = None,
        interval: float = 2.0,
        on_update: Optional[UpdateCallback] = None,
        on_reminder: Optional[ReminderCallback] = None,
    ):
        self.detector = detector
        self.tracker = tracker
        self.store = store
        self.api_client = api_client
        self.interval = interval
        self.on_update = on_update
        self.on_reminder = on_reminder

        self.reminders_enabled = False
        self.reminder_interval_seconds: Optional[float] = None
        self.last_sample: Optional[PostureSample] = None
        self.warnings: list = []

        self._task: Optional[asyncio.Task] = None
        self._last_reminder_at: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def apply_settings(self, settings: SettingsResponse) -> None:
        self.detector.set_sensitivity(settings.sensitivity)
        self.reminders_enabled = settings.enable_reminders
        self.reminder_interval_seconds = settings.reminder_interval * 60

    def start(self) -> TrackedSession:
        """
        Begin a session and schedule the tick task on the running loop.
        Raises SessionAlreadyActiveError if tracking is already on.
        """
        session = self.tracker.start()
        self._last_reminder_at = asyncio.get_running_loop().time()
        self._task = asyncio.create_task(self._run(), name=f"posture-tracking-{session.id}")
        return session

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            await asyncio.sleep(self.interval)

            sample = self.detector.analyze_frame()
            session = self.tracker.tick(sample)
            if session is None:
                return
            self.last_sample = sample

            if self.on_update is not None:
                self.on_update(sample, session)

            self._maybe_remind(loop.time())

    def _maybe_remind(self, now: float) -> None:
        if not self.reminders_enabled or not self.reminder_interval_seconds:
            return
        if now - self._last_reminder_at < self.reminder_interval_seconds:
            return

        self._last_reminder_at = now
        logger.info("Posture reminder due")
        if self.on_reminder is not None:
            self.on_reminder(REMINDER_MESSAGE)

    async def stop(self) -> Optional[TrackedSession]:
        """
        Cancel the tick task, finalize the session and persist it.
        A tick that failed earlier is reported as a warning; the session
        is still finalized. Returns None when nothing was being tracked.
        """
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                self._warn(f"Tracking stopped after a failed tick: {e}")

        session = self.tracker.stop()
        if session is not None:
            # Store and API calls block; keep them off the event loop
            await asyncio.to_thread(self._persist, session)
        return session

    async def run_for(self, seconds: float) -> Optional[TrackedSession]:
        self.start()
        await asyncio.sleep(seconds)
        return await self.stop()

    def _persist(self, session: TrackedSession) -> None:
        """
        Save locally and sync upstream. Failures become warnings so the
        finished session stays usable in memory.
        """
        if self.store is not None:
            try:
                self.store.save_session(session)
            except LocalStoreError as e:
                self._warn(f"Session {session.id} not saved locally: {e}")

        if self.api_client is not None and self.api_client.token:
            try:
                self.api_client.create_session(session)
            except ApiError as e:
                self._warn(f"Session {session.id} not synced: {e}")

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)
