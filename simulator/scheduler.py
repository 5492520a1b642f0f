import asyncio
import logging

log = logging.getLogger(__name__)

# Guard against wedging the host on a non-halting machine (enough for the 5-state champion)
MAX_STEPS = 50_000_000

# Below this speed every step is followed by a real-time delay
SLOW_SPEED = 10
MIN_STEP_DELAY = 0.001

# Pause between batches at and above SLOW_SPEED: one display frame
FRAME_INTERVAL = 1 / 60

# (minimum steps/second, steps per batch), fastest tier first
SPEED_TIERS = (
    (50_000, 25_000),
    (25_000, 10_000),
    (10_000, 5_000),
    (1_000, 1_000),
    (50, 100),
    (SLOW_SPEED, 10),
)

STOPPED = "stopped"
RUNNING = "running"

# Outcomes of a finished run
HALTED = "halted"
FORCED_STOP = "forced_stop"


def batch_size_for_speed(speed):
    for threshold, size in SPEED_TIERS:
        if speed >= threshold:
            return size
    return 1


def step_delay_for_speed(speed):
    """Seconds to wait between batches: one frame in the batched tiers, 1/speed below them."""
    if speed >= SLOW_SPEED:
        return FRAME_INTERVAL
    return max(MIN_STEP_DELAY, 1.0 / speed)


async def run_batches(step_batch, batch_size, pause):
    """Call `step_batch(batch_size())` until it returns False, awaiting `pause()` in between.

    The batching itself is plain sequential code; `pause` is the only suspension point.
    """
    while step_batch(batch_size()):
        await pause()


class RunScheduler:
    """Drives an Engine at a logical speed on the running asyncio loop."""

    def __init__(self, engine, speed=1.0, max_steps=MAX_STEPS, sleep=asyncio.sleep):
        self.engine = engine
        self.max_steps = max_steps
        self._speed = None
        self._sleep = sleep
        self._task = None
        self._listeners = []
        self.status = STOPPED
        self.outcome = None
        self.forced_stop = False
        self.steps_this_run = 0
        self.set_speed(speed)

    @property
    def speed(self):
        return self._speed

    @property
    def is_running(self):
        return self._task is not None and not self._task.done()

    def set_speed(self, steps_per_second):
        if steps_per_second <= 0:
            raise ValueError(f"Speed must be positive, got {steps_per_second}")
        self._speed = float(steps_per_second)

    def run(self):
        """Start the batch loop as a task on the running loop; no-op while already running."""
        if self.is_running:
            return self._task
        self.steps_this_run = 0
        self.forced_stop = False
        self.outcome = None
        self._task = asyncio.get_running_loop().create_task(self._drive())
        self._set_status(RUNNING)
        return self._task

    def stop(self):
        if self.is_running:
            self._task.cancel()
        self._task = None
        if self.outcome is None and self.status == RUNNING:
            self.outcome = STOPPED
        self._set_status(STOPPED)

    def reset(self):
        self.stop()
        self.engine.reset()

    async def wait(self):
        """Wait for the current run to finish and return its outcome."""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        return self.outcome

    def subscribe(self, listener):
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    # === Internals ===
    async def _drive(self):
        try:
            await run_batches(self._step_batch, lambda: batch_size_for_speed(self._speed), self._pause)
        except asyncio.CancelledError:
            log.debug("Run cancelled after %d steps", self.steps_this_run)
            raise
        except Exception:
            log.exception("Run failed after %d steps", self.steps_this_run)
            raise
        finally:
            # stop() may already have detached this task and started another
            if self._task is asyncio.current_task():
                self._task = None
                if self.outcome is None:
                    self.outcome = STOPPED
                self._set_status(STOPPED)

    def _step_batch(self, size):
        if self.engine.is_halted:
            self.outcome = HALTED
            return False

        remaining = self.max_steps - self.steps_this_run
        if remaining <= 0:
            self._force_stop()
            return False

        self.steps_this_run += self.engine.advance(min(size, remaining))
        if self.engine.is_halted:
            self.outcome = HALTED
            log.info(
                "Machine halted in state %r after %d steps (score %d)",
                self.engine.halt_state,
                self.engine.step_count,
                self.engine.score,
            )
            return False
        if self.steps_this_run >= self.max_steps:
            self._force_stop()
            return False
        return True

    def _force_stop(self):
        self.forced_stop = True
        self.outcome = FORCED_STOP
        log.warning("Forced stop after %d steps (safety ceiling)", self.max_steps)

    async def _pause(self):
        await self._sleep(step_delay_for_speed(self._speed))

    def _set_status(self, status):
        if status == self.status:
            return
        self.status = status
        for listener in list(self._listeners):
            listener(status, self.outcome)
