"""
In-Memory Job Queue

Tracks extraction jobs and runs them on a fixed-size pool of asyncio
workers fed by an asyncio.Queue.

- create_job() stores the job as pending, enqueues it and returns the id
  without waiting for processing to start
- Processor exceptions are captured into job.error (status "failed") and
  never reach the create_job() caller
- With no processor registered, a job completes after a short delay with a
  placeholder result

Jobs live only in process memory and are lost on restart.
"""

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional

from src.common.config import Config
from src.common.logger import job_logger

from .models import Job, JobStatus

logger = logging.getLogger(__name__)

Processor = Callable[[Job], Awaitable[Any]]

FALLBACK_RESULT_MESSAGE = "queued for background processing"


class JobQueue:
    """
    Bounded asyncio worker pool with an in-memory job map.

    Workers start lazily on the first create_job() call, so the queue can be
    constructed outside a running event loop.
    """

    def __init__(
        self,
        worker_count: Optional[int] = None,
        fallback_delay: Optional[float] = None,
    ):
        """
        Initialize job queue.

        Args:
            worker_count: Max jobs processed concurrently (default: Config.JOB_WORKER_COUNT)
            fallback_delay: Seconds before a job with no processor completes
                            (default: Config.JOB_FALLBACK_DELAY_SECONDS)
        """
        self.worker_count = worker_count or Config.JOB_WORKER_COUNT
        self.fallback_delay = fallback_delay if fallback_delay is not None else Config.JOB_FALLBACK_DELAY_SECONDS

        self._jobs: Dict[str, Job] = {}
        self._done: Dict[str, asyncio.Event] = {}
        self._processors: Dict[Optional[str], Processor] = {}
        self._queue: Optional[asyncio.Queue] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._workers: List[asyncio.Task] = []

    # ===== PROCESSORS =====

    def set_processor(self, processor: Optional[Processor], job_type: Optional[str] = None) -> None:
        """
        Register the coroutine function that executes jobs.

        Args:
            processor: async fn(job) -> result; None unregisters
            job_type: Restrict to one job type; None registers the default
                      processor used for every type without its own
        """
        if processor is None:
            self._processors.pop(job_type, None)
            logger.info(f"Processor removed for job type: {job_type or 'default'}")
            return
        self._processors[job_type] = processor
        logger.info(f"Processor registered for job type: {job_type or 'default'}")

    def _processor_for(self, job_type: str) -> Optional[Processor]:
        return self._processors.get(job_type) or self._processors.get(None)

    # ===== JOB LIFECYCLE =====

    async def create_job(self, job_type: str, payload: Dict[str, Any]) -> str:
        """
        Create a job and schedule it for processing.

        Returns before processing starts.

        Args:
            job_type: JobType value (unknown types are accepted)
            payload: Job input data

        Returns:
            Job id (e.g., "job_3f2a9c...")
        """
        self._ensure_workers()

        job = Job(id=f"job_{uuid.uuid4().hex}", type=str(job_type), payload=dict(payload))
        self._jobs[job.id] = job
        self._done[job.id] = asyncio.Event()
        self._queue.put_nowait(job.id)

        logger.info(f"Job created: {job.id} ({job.type})")
        return job.id

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a job by id, or None if unknown."""
        return self._jobs.get(job_id)

    def list_jobs(self, status: Optional[JobStatus] = None) -> List[Job]:
        """All jobs (optionally filtered by status), oldest first."""
        jobs = sorted(self._jobs.values(), key=lambda j: j.created_at)
        if status is None:
            return jobs
        return [j for j in jobs if j.status == JobStatus(status)]

    def delete_job(self, job_id: str) -> bool:
        """
        Forget a job.

        A job deleted while pending is skipped by the workers; one deleted
        while processing still runs to completion.

        Returns:
            True if the job existed
        """
        job = self._jobs.pop(job_id, None)
        event = self._done.pop(job_id, None)
        if event is not None:
            event.set()
        if job is None:
            return False
        logger.info(f"Job deleted: {job_id}")
        return True

    async def wait_for_job(self, job_id: str, timeout: Optional[float] = None) -> Optional[Job]:
        """
        Wait until a job reaches a terminal status.

        Args:
            job_id: Job to wait for
            timeout: Seconds to wait (None = no limit)

        Returns:
            The job, or None if it is unknown (or was deleted)

        Raises:
            asyncio.TimeoutError: If the timeout expires first
        """
        event = self._done.get(job_id)
        if event is None:
            return None
        await asyncio.wait_for(event.wait(), timeout)
        return self._jobs.get(job_id)

    # ===== WORKERS =====

    def _ensure_workers(self) -> None:
        loop = asyncio.get_running_loop()
        if self._queue is None or self._loop is not loop:
            self._rebind(loop)
        self._workers = [w for w in self._workers if not w.done()]
        while len(self._workers) < self.worker_count:
            index = len(self._workers)
            self._workers.append(asyncio.create_task(self._worker(index), name=f"job-worker-{index}"))

    def _rebind(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Create the queue on the running loop.

        asyncio.Queue and Event are bound to the loop that first uses them.
        When the queue is reused under a new loop (e.g. a second
        asyncio.run()), workers of the old loop are gone and pending jobs are
        re-enqueued on a fresh queue.
        """
        pending = [job.id for job in self.list_jobs(JobStatus.PENDING)]
        if self._loop is not None:
            logger.warning(f"Event loop changed, re-enqueuing {len(pending)} pending jobs")

        self._queue = asyncio.Queue()
        self._loop = loop
        self._workers = []
        for job_id in pending:
            self._done[job_id] = asyncio.Event()
            self._queue.put_nowait(job_id)

    async def _worker(self, index: int) -> None:
        logger.debug(f"Job worker {index} started")
        while True:
            job_id = await self._queue.get()
            try:
                await self._process(job_id)
            finally:
                self._queue.task_done()

    async def _process(self, job_id: str) -> None:
        job = self._jobs.get(job_id)
        if job is None:
            logger.debug(f"Job {job_id} was deleted before processing, skipping")
            return

        log = job_logger(__name__, job)
        job.status = JobStatus.PROCESSING
        job.touch()
        log.info("Job started")

        try:
            processor = self._processor_for(job.type)
            if processor is None:
                await asyncio.sleep(self.fallback_delay)
                job.result = {"processed": True, "message": FALLBACK_RESULT_MESSAGE}
            else:
                job.result = await processor(job)
            job.status = JobStatus.COMPLETED
            log.info("Job completed")
        except Exception as e:
            job.status = JobStatus.FAILED
            job.error = str(e)
            log.exception(f"Job failed: {e}")
        finally:
            job.touch()
            event = self._done.get(job.id)
            if event is not None:
                event.set()

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        if self._queue is not None and self._loop is asyncio.get_running_loop():
            await self._queue.join()

    async def shutdown(self) -> None:
        """Cancel all workers. Pending jobs stay pending."""
        if self._loop is asyncio.get_running_loop():
            for worker in self._workers:
                worker.cancel()
            await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Job queue workers stopped")
