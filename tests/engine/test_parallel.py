"""Tests for the thread-pool evaluator."""

from __future__ import annotations

import pytest

from cgt_engine.engine.parallel import ParallelEvaluator


class TestRunAll:
    def test_results_in_task_order(self) -> None:
        with ParallelEvaluator(max_workers=3) as evaluator:
            tasks = [lambda i=i: i * i for i in range(10)]
            assert evaluator.run_all(tasks) == [i * i for i in range(10)]

    def test_empty_and_single(self) -> None:
        with ParallelEvaluator(max_workers=2) as evaluator:
            assert evaluator.run_all([]) == []
            assert evaluator.run_all([lambda: "only"]) == ["only"]

    def test_exception_propagates(self) -> None:
        def boom() -> int:
            raise ValueError("boom")

        with ParallelEvaluator(max_workers=2) as evaluator:
            with pytest.raises(ValueError, match="boom"):
                evaluator.run_all([lambda: 1, boom, lambda: 3])

    def test_nested_joins_do_not_deadlock(self) -> None:
        # ワーカー1つでも入れ子の run_all が完了すること
        evaluator = ParallelEvaluator(max_workers=1)

        def inner() -> int:
            return sum(evaluator.run_all([lambda: 1, lambda: 2]))

        try:
            assert evaluator.run_all([inner, inner, inner]) == [3, 3, 3]
        finally:
            evaluator.shutdown()

    def test_reusable_after_shutdown(self) -> None:
        evaluator = ParallelEvaluator(max_workers=2)
        assert evaluator.run_all([lambda: 1, lambda: 2]) == [1, 2]
        evaluator.shutdown()
        assert evaluator.run_all([lambda: 3, lambda: 4]) == [3, 4]
        evaluator.shutdown()
