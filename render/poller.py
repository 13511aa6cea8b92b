"""Submit / poll-until-terminal state machine for external rendering jobs."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, FrozenSet, Optional, Protocol

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, wait_fixed

from config.settings import VideoSettings
from core import JobState, JobStatus, VideoJob
from utils.exceptions import GenerationError, RoastPipelineError, TransientNetworkError


logger = logging.getLogger(__name__)

SubmitFn = Callable[[], Awaitable[str]]
StatusFn = Callable[[str], Awaitable[JobStatus]]

_NON_TERMINAL: FrozenSet[JobState] = frozenset({JobState.PROCESSING})
_ANY_OUTCOME: FrozenSet[JobState] = frozenset(
    {JobState.PROCESSING, JobState.DONE, JobState.ERRORED, JobState.REJECTED, JobState.TIMED_OUT}
)

ALLOWED_TRANSITIONS: Dict[JobState, FrozenSet[JobState]] = {
    JobState.SUBMITTED: _ANY_OUTCOME,
    JobState.PROCESSING: _ANY_OUTCOME - _NON_TERMINAL,
    JobState.DONE: frozenset(),
    JobState.ERRORED: frozenset(),
    JobState.REJECTED: frozenset(),
    JobState.TIMED_OUT: frozenset(),
}


class Clock(Protocol):
    def monotonic(self) -> float:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class AsyncioClock:
    """Wall clock; sleeping suspends only the calling task."""

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


def transition(job: VideoJob, new_state: JobState) -> None:
    """Move a job to ``new_state``; staying in Processing is a no-op."""
    if job.state == new_state and new_state in _NON_TERMINAL:
        return
    if new_state not in ALLOWED_TRANSITIONS[job.state]:
        raise RuntimeError(f"illegal job transition {job.state.value} -> {new_state.value} for {job.job_id}")
    job.state = new_state
    job.history.append(new_state)


class JobPoller:
    """Drives one job at a time from submission to a terminal state.

    Every status check, including one that fails transiently, spends one
    attempt. Checks are spaced ``interval_s`` apart with no wait before the
    first one, so N checks cost N-1 waits. Transient failures are retried
    through tenacity until ``max_transient_failures`` is exceeded, at which
    point the job is Errored (or TimedOut if the attempt budget ran out first).
    """

    def __init__(
        self,
        check_status: StatusFn,
        *,
        interval_s: float = 10.0,
        max_attempts: int = 60,
        max_transient_failures: int = 5,
        max_wait_s: Optional[float] = None,
        clock: Optional[Clock] = None,
        name: str = "job",
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._check_status = check_status
        self.interval_s = max(0.0, float(interval_s))
        self.max_attempts = int(max_attempts)
        self.max_transient_failures = max(0, int(max_transient_failures))
        self.max_wait_s = max_wait_s
        self._clock: Clock = clock or AsyncioClock()
        self.name = name

    @classmethod
    def from_settings(
        cls,
        check_status: StatusFn,
        settings: VideoSettings,
        *,
        short: bool = False,
        clock: Optional[Clock] = None,
        name: str = "video",
    ) -> "JobPoller":
        return cls(
            check_status,
            interval_s=settings.poll_interval_s,
            max_attempts=settings.short_max_attempts if short else settings.max_attempts,
            max_transient_failures=settings.max_transient_failures,
            clock=clock,
            name=name,
        )

    async def run(self, submit: SubmitFn) -> VideoJob:
        """Submit a job and poll it to a terminal state."""
        try:
            job_id = str(await submit() or "").strip()
        except RoastPipelineError:
            raise
        except Exception as exc:
            raise GenerationError(f"{self.name} submit failed: {exc}") from exc
        if not job_id:
            raise GenerationError(f"{self.name} submit returned an empty job id")
        return await self.poll(job_id)

    async def poll(
        self,
        job_id: str,
        *,
        max_attempts: Optional[int] = None,
        interval_s: Optional[float] = None,
    ) -> VideoJob:
        budget = int(max_attempts) if max_attempts is not None else self.max_attempts
        interval = float(interval_s) if interval_s is not None else self.interval_s
        max_wait = float(self.max_wait_s) if self.max_wait_s is not None else interval * budget

        job = VideoJob(job_id=job_id)
        started = self._clock.monotonic()
        logger.info(
            "poll_start name=%s job_id=%s max_attempts=%s interval_s=%s",
            self.name,
            job_id,
            budget,
            interval,
        )

        while not job.is_terminal:
            try:
                status = await self._checked_status(job, budget=budget, interval=interval, max_wait=max_wait, started=started)
            except TransientNetworkError as exc:
                job.waited_s = self._clock.monotonic() - started
                if job.attempts >= budget or job.waited_s + interval > max_wait:
                    self._finish(job, JobState.TIMED_OUT, f"{self.name} timed out after {job.attempts} attempts; last error: {exc}")
                else:
                    self._finish(
                        job,
                        JobState.ERRORED,
                        f"{self.name} status check failed after {job.transient_failures} transient errors: {exc}",
                    )
                break
            except RoastPipelineError as exc:
                self._finish(job, JobState.ERRORED, f"{self.name} status check failed: {exc}")
                break

            job.waited_s = self._clock.monotonic() - started
            self._apply(job, status)
            if job.is_terminal:
                break

            if job.attempts >= budget or job.waited_s + interval > max_wait:
                self._finish(
                    job,
                    JobState.TIMED_OUT,
                    f"{self.name} generation timed out after {job.attempts} attempts ({int(job.waited_s)} seconds)",
                )
                break
            await self._clock.sleep(interval)

        job.waited_s = self._clock.monotonic() - started
        logger.info(
            "poll_done name=%s job_id=%s state=%s attempts=%s transient_failures=%s waited_s=%.1f",
            self.name,
            job.job_id,
            job.state.value,
            job.attempts,
            job.transient_failures,
            job.waited_s,
        )
        return job

    async def _checked_status(
        self,
        job: VideoJob,
        *,
        budget: int,
        interval: float,
        max_wait: float,
        started: float,
    ) -> JobStatus:
        def _stop(retry_state: RetryCallState) -> bool:
            waited = self._clock.monotonic() - started
            return (
                job.transient_failures > self.max_transient_failures
                or job.attempts >= budget
                or waited + interval > max_wait
            )

        def _before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "poll_transient_failure name=%s job_id=%s attempt=%s failures=%s error=%s",
                self.name,
                job.job_id,
                job.attempts,
                job.transient_failures,
                error,
            )

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(TransientNetworkError),
            stop=_stop,
            wait=wait_fixed(interval),
            sleep=self._clock.sleep,
            before_sleep=_before_sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                job.attempts += 1
                try:
                    status = await self._check_status(job.job_id)
                except TransientNetworkError:
                    job.transient_failures += 1
                    raise
                logger.debug(
                    "poll_attempt name=%s job_id=%s attempt=%s status=%s",
                    self.name,
                    job.job_id,
                    job.attempts,
                    status.raw_status or status.state.value,
                )
                return status
        raise TransientNetworkError(f"{self.name} status check retries exhausted")

    def _apply(self, job: VideoJob, status: JobStatus) -> None:
        state = status.state
        if state in {JobState.SUBMITTED, JobState.PROCESSING}:
            transition(job, JobState.PROCESSING)
            return
        if state == JobState.DONE:
            if not status.result_url:
                self._finish(job, JobState.ERRORED, f"{self.name} finished without a result URL")
                return
            job.result_url = status.result_url
            transition(job, JobState.DONE)
            return
        if state == JobState.REJECTED:
            self._finish(job, JobState.REJECTED, status.error or f"{self.name} was rejected by the provider")
            return
        if state == JobState.TIMED_OUT:
            self._finish(job, JobState.TIMED_OUT, status.error or f"{self.name} timed out at the provider")
            return
        self._finish(job, JobState.ERRORED, status.error or f"{self.name} failed")

    def _finish(self, job: VideoJob, state: JobState, error: str) -> None:
        job.error = error
        transition(job, state)
        logger.warning("poll_failed name=%s job_id=%s state=%s error=%s", self.name, job.job_id, state.value, error)
