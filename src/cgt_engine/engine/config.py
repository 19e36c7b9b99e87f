"""Engine configuration.

エンジンの設定定義。逐次実行と並列実行でスレッド数や分配の深さが異なるため、
設定クラスで管理する。
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for GameEngine.

    Attributes:
        parallel:           兄弟部分木の標準形計算をワーカープールに分配するか
        max_workers:        ワーカースレッド数
        parallel_depth:     分配を行う再帰の深さの上限（これより深い部分は逐次実行）
        parallel_threshold: 分配する最小の子の数（少なければ逐次実行の方が速い）
        lock_stripes:       アリーナとキャッシュのロック分割数
    """

    parallel: bool = False
    max_workers: int = 4
    parallel_depth: int = 2
    parallel_threshold: int = 2
    lock_stripes: int = 64

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.parallel_depth < 0:
            raise ValueError(f"parallel_depth must be >= 0, got {self.parallel_depth}")
        if self.parallel_threshold < 1:
            raise ValueError(
                f"parallel_threshold must be >= 1, got {self.parallel_threshold}"
            )
        if self.lock_stripes < 1:
            raise ValueError(f"lock_stripes must be >= 1, got {self.lock_stripes}")


# 単一スレッドのプリセット（デフォルト）
SEQUENTIAL_CONFIG = EngineConfig()

# 並列評価のプリセット
# CPython の GIL 下では CPU 速度の向上は限定的だが、結果は逐次実行と同一になる
PARALLEL_CONFIG = EngineConfig(
    parallel=True,
    max_workers=max(2, os.cpu_count() or 2),
    parallel_depth=2,
)
