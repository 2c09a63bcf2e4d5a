"""Fixed-size worker pool draining a shared task queue."""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_CONCURRENCY = 3
DEFAULT_DELAY = 0.1
PROGRESS_EVERY = 20


def run_queue(
    tasks: Iterable[T],
    handler: Callable[[T], R | None],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    delay: float = DEFAULT_DELAY,
    progress_every: int = PROGRESS_EVERY,
    progress: Callable[[str], None] | None = None,
) -> list[R]:
    """
    tasks를 concurrency개의 worker로 소진하고 None이 아닌 handler 결과를 모은다.

    - 각 task는 SimpleQueue에서 원자적으로 꺼내므로 정확히 한 번만 처리된다.
    - 결과 순서는 보장하지 않는다 (worker 간 경쟁).
    - 전체 완료 수가 progress_every의 배수가 될 때마다 진행 상황을 로그한다.
    - worker는 task 하나를 끝낼 때마다 delay초 쉰다.
    - handler는 예외를 던지지 않아야 한다. 던지면 pool 종료 후 그대로 전파된다.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    pending: queue.SimpleQueue[T] = queue.SimpleQueue()
    total = 0
    for task in tasks:
        pending.put(task)
        total += 1

    results: list[R] = []
    lock = threading.Lock()
    done = 0

    def worker() -> None:
        nonlocal done
        while True:
            try:
                task = pending.get_nowait()
            except queue.Empty:
                return
            result = handler(task)
            with lock:
                if result is not None:
                    results.append(result)
                done += 1
                count = done
            if progress_every > 0 and count % progress_every == 0:
                logger.info("  %d/%d", count, total)
                if progress:
                    progress(f"  {count}/{total}")
            if delay > 0:
                time.sleep(delay)

    logger.debug("run_queue: %d tasks, %d workers", total, concurrency)
    with ThreadPoolExecutor(max_workers=concurrency) as executor:
        futures = [executor.submit(worker) for _ in range(concurrency)]
    for future in futures:
        future.result()

    logger.debug("run_queue: %d/%d tasks produced results", len(results), total)
    return results
