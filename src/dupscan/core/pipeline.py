"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/pipeline.py
Bounded worker pool that hashes files concurrently.

    files ──► producer thread ──► input queue ──► N hash workers ──► output queue ──► caller

- Both queues are bounded; a full queue blocks its producer (backpressure).
- `files` may be a lazy walker iterator; the walk then runs on the producer thread.
- A failing hash is reported once as a warning and the file is dropped. No retries.
- Cancellation is checked between files. Once stopped, the producer stops feeding,
  workers finish the file in hand and the pool drains before map() returns.
- If the caller abandons the iterator, all threads are shut down.
"""

import logging
import queue
import threading
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from dupscan.core.errors import HashIOError
from dupscan.core.models import FileDescriptor, PipelineConfig, Stage
from dupscan.core.progress import CompleteEvent, ProgressEvent, ProgressReporter

logger = logging.getLogger(__name__)

_SENTINEL = object()
_POLL_INTERVAL = 0.1


class HashWorkerPool:
    """
    Attributes:
        workers: Number of hashing threads
        queue_size: Capacity of each of the two bounded queues
        progress_interval: Emit a ProgressEvent every N hashed files
    """

    def __init__(
        self,
        workers: Optional[int] = None,
        queue_size: Optional[int] = None,
        progress_interval: int = PipelineConfig.FILE_PROGRESS_INTERVAL
    ):
        self.workers = workers or PipelineConfig.default_workers()
        self.queue_size = queue_size or self.workers * PipelineConfig.QUEUE_SIZE_PER_WORKER
        self.progress_interval = progress_interval
        if self.workers < 1 or self.queue_size < 1 or self.progress_interval < 1:
            raise ValueError("Workers, queue size and progress interval must be positive")

    def map(
        self,
        files: Iterable[FileDescriptor],
        hash_func: Callable[[FileDescriptor], bytes],
        reporter: Optional[ProgressReporter] = None,
        stage: str = Stage.FULL.value,
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Iterator[Tuple[FileDescriptor, bytes]]:
        """
        Hash every file with `hash_func` and yield (descriptor, digest) pairs in
        completion order.
        """
        reporter = reporter or ProgressReporter()
        input_q: "queue.Queue" = queue.Queue(maxsize=self.queue_size)
        output_q: "queue.Queue" = queue.Queue(maxsize=self.queue_size)
        closing = threading.Event()
        failures: List[BaseException] = []
        hashed_in_stage = [0]
        count_lock = threading.Lock()

        def is_stopped() -> bool:
            return bool(stopped_flag and stopped_flag())

        def put(q: "queue.Queue", item) -> bool:
            while not closing.is_set():
                try:
                    q.put(item, timeout=_POLL_INTERVAL)
                    return True
                except queue.Full:
                    continue
            return False

        def produce():
            try:
                for descriptor in files:
                    if is_stopped():
                        logger.debug(f"[{stage}] producer stopped by user")
                        break
                    if not put(input_q, descriptor):
                        break
            except BaseException as e:
                failures.append(e)
            finally:
                for _ in range(self.workers):
                    put(input_q, _SENTINEL)

        def work():
            try:
                while not closing.is_set():
                    try:
                        item = input_q.get(timeout=_POLL_INTERVAL)
                    except queue.Empty:
                        continue
                    if item is _SENTINEL:
                        break
                    if is_stopped():
                        continue  # drain without starting new files

                    try:
                        digest = hash_func(item)
                    except HashIOError as e:
                        reporter.warning(item.path, str(e))
                        continue
                    except Exception as e:
                        logger.exception(f"Unexpected error hashing {item.path}")
                        reporter.warning(item.path, f"Unexpected error hashing {item.path}: {e}")
                        continue

                    reporter.counters.add_hashed()
                    with count_lock:
                        hashed_in_stage[0] += 1
                        done = hashed_in_stage[0]
                    if done % self.progress_interval == 0:
                        reporter.emit(ProgressEvent(
                            stage=stage,
                            processed_dirs=reporter.counters.processed_dirs,
                            processed_files=done,
                            current_path=item.path,
                            queue_depth=input_q.qsize(),
                        ))
                    if not put(output_q, (item, digest)):
                        break
            finally:
                put(output_q, _SENTINEL)

        threads = [threading.Thread(target=produce, name=f"dupscan-{stage}-producer", daemon=True)]
        threads += [
            threading.Thread(target=work, name=f"dupscan-{stage}-worker-{i}", daemon=True)
            for i in range(self.workers)
        ]
        for t in threads:
            t.start()

        finished = 0
        try:
            while finished < self.workers:
                item = output_q.get()
                if item is _SENTINEL:
                    finished += 1
                    continue
                yield item
        finally:
            closing.set()
            for t in threads:
                t.join()

        if failures:
            raise failures[0]

        reporter.emit(CompleteEvent(
            stage=stage,
            processed_dirs=reporter.counters.processed_dirs,
            processed_files=hashed_in_stage[0],
            total_files=hashed_in_stage[0],
            cancelled=is_stopped(),
        ))
