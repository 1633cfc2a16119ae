"""
Project Verification

Newly listed projects are verified in the background, after the upload
response has been sent. The HTTP layer only enqueues project ids; a worker
task drains the queue and hands each id to a VerificationService.

The bundled FlagVerificationService runs no checks on the archive: it
only marks the project as verified. A real implementation (unpacking the
archive, running its tests in a sandbox, ...) can replace it without
touching the routes.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger("uvicorn.error")


class VerificationService(ABC):
    """Verification Service Abstract Base Class"""

    @abstractmethod
    async def verify(self, project_id: int) -> None:
        """
        Verify one project and record the outcome.

        Must be idempotent: the queue retries after an exception, so the
        same project can be passed more than once.
        """
        pass


class FlagVerificationService(VerificationService):
    """Marks the project verified without inspecting it"""

    def __init__(self, storage):
        self.storage = storage

    async def verify(self, project_id: int) -> None:
        if await self.storage.get_project(project_id) is None:
            raise LookupError(f"Project {project_id} not found")
        if await self.storage.verify_project(project_id):
            logger.info("[verify] project %s verified", project_id)


@dataclass
class VerificationJob:
    project_id: int
    not_before: float  # Event-loop time before which the job must not run
    attempt: int = 1


class VerificationQueue:
    """
    In-process FIFO of verification jobs served by a single worker task.

    - Each job runs no earlier than `delay_sec` after it was enqueued
    - A failing job is logged and re-queued after `retry_backoff_sec`,
      up to `max_attempts` attempts in total, then counted as failed
    - Jobs live in memory only; pending jobs are lost on restart
    """

    def __init__(
        self,
        service: VerificationService,
        delay_sec: float = 5.0,
        max_attempts: int = 3,
        retry_backoff_sec: float = 2.0,
    ):
        self.service = service
        self.delay_sec = delay_sec
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff_sec = retry_backoff_sec
        self._queue: asyncio.Queue[VerificationJob] | None = None
        self._worker: asyncio.Task | None = None
        self._counts = {"verified": 0, "failed": 0, "retried": 0}

    @property
    def queue(self) -> "asyncio.Queue[VerificationJob]":
        # Created lazily so the queue binds to the loop that uses it
        if self._queue is None:
            self._queue = asyncio.Queue()
        return self._queue

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def enqueue(self, project_id: int) -> None:
        """Schedule verification of a project; returns immediately."""
        now = asyncio.get_running_loop().time()
        self.queue.put_nowait(VerificationJob(project_id=project_id, not_before=now + self.delay_sec))
        logger.info("[verify] project %s queued (delay=%ss)", project_id, self.delay_sec)

    async def start(self) -> None:
        if not self.running:
            self._worker = asyncio.create_task(self._run(), name="verification-worker")

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    async def drain(self) -> None:
        """Wait until every queued job (including retries) has finished."""
        await self.queue.join()

    def stats(self) -> dict:
        pending = self._queue.qsize() if self._queue is not None else 0
        return {"pending": pending, **self._counts}

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            job = await self.queue.get()
            try:
                wait = job.not_before - loop.time()
                if wait > 0:
                    await asyncio.sleep(wait)
                await self._attempt(job)
            finally:
                self.queue.task_done()

    async def _attempt(self, job: VerificationJob) -> None:
        try:
            await self.service.verify(job.project_id)
        except Exception:
            logger.exception("[verify] project %s attempt %s/%s failed",
                             job.project_id, job.attempt, self.max_attempts)
            if job.attempt >= self.max_attempts:
                self._counts["failed"] += 1
                logger.error("[verify] giving up on project %s", job.project_id)
                return
            self._counts["retried"] += 1
            retry_at = asyncio.get_running_loop().time() + self.retry_backoff_sec
            # Re-queued before task_done() so drain() keeps waiting for it
            self.queue.put_nowait(VerificationJob(job.project_id, retry_at, job.attempt + 1))
            return
        self._counts["verified"] += 1
