"""Parallel evaluator — runs independent sibling tasks on a thread pool.

独立した兄弟部分木の計算をスレッドプールで実行する。

親の簡約ステップは全ての子の結果を待ってから逐次に行うため、
並列化は実行時間にしか影響せず、出力は逐次実行と同一になる。

デッドロック回避:
  ワーカー自身がさらに子タスクを投入して待つ（入れ子の join）と、
  有限サイズのプールでは全ワーカーが待ち状態になり得る。
  そこで join 時に未着手のタスクは cancel() して呼び出し側で実行する。
  実行中のタスクは自分の子だけを待つので、帰納的に必ず完了する。
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ParallelEvaluator:
    """Thread-pool dispatcher for independent subtree computations."""

    def __init__(self, max_workers: int = 4) -> None:
        self.max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()

    def _get_executor(self) -> ThreadPoolExecutor:
        """Get or create the pool (lazy initialized)."""
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="cgt-worker",
                )
            return self._executor

    def run_all(self, tasks: Sequence[Callable[[], T]]) -> list[T]:
        """Run every task and return their results in task order.

        最初のタスクは呼び出し側スレッドで実行し、残りをプールへ投入する。
        いずれかのタスクが例外を送出したら、未着手の兄弟タスクをキャンセルして
        例外をそのまま再送出する（この部分木の計算だけが中断される）。
        """
        if not tasks:
            return []
        if len(tasks) == 1:
            return [tasks[0]()]

        executor = self._get_executor()
        futures: list[Future[T]] = [executor.submit(task) for task in tasks[1:]]
        logger.debug("dispatched %d sibling tasks", len(futures))
        try:
            results = [tasks[0]()]
            for task, future in zip(tasks[1:], futures):
                if future.cancel():
                    # まだ誰も着手していない → 自分で実行する
                    results.append(task())
                else:
                    results.append(future.result())
        except BaseException:
            for future in futures:
                future.cancel()
            raise
        return results

    def shutdown(self) -> None:
        """Shutdown the pool (a later run_all creates a new one)."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> ParallelEvaluator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
