"""Human-readable notation for positions.

局面を組合せゲーム理論の記法で文字列にする。

  数:           0, 2, -1, 1/2, -3/8
  ニム数:       *, *2, *3
  数 + ニム数:  1*, -1/2*3
  一般の局面:   {1|-1}, {0,*|0}, {1/2|-2}

出力を決定的にするため、各選択肢は表示文字列の順に並べる
（局面IDの順は並列実行時の登録順に依存するため使わない）。
"""

from __future__ import annotations

from fractions import Fraction

from cgt_engine.game.arena import ValueArena
from cgt_engine.game.types import NodeKind, PositionId
from cgt_engine.numeric.dyadic import format_number


def format_numeric(number: Fraction, nimber: int = 0) -> str:
    """x + *n を "x*n" 形式で表示する。"""
    if nimber == 0:
        return format_number(number)
    star = "*" if nimber == 1 else f"*{nimber}"
    if number == 0:
        return star
    return f"{format_number(number)}{star}"


def position_to_str(
    arena: ValueArena, position_id: PositionId, max_length: int | None = None
) -> str:
    """Render a position (canonical or not) in braces notation.

    再帰を使わずスタックで後行順に表記を組み立てる。
    標準形でない DAG（和の結果など）は共有部分が木として展開されるため、
    表記が非常に長くなり得る。max_length を指定すると各部分の表記を
    max_length + 1 文字で打ち切り、最後に "..." を付けて返す。
    """
    limit = None if max_length is None else max_length + 1
    memo: dict[PositionId, str] = {}
    stack: list[tuple[PositionId, bool]] = [(position_id, False)]
    while stack:
        p, expanded = stack.pop()
        if p in memo:
            continue
        node = arena.resolve(p)
        if node.kind is NodeKind.NUMERIC:
            memo[p] = format_numeric(node.number, node.nimber)
            continue
        if not expanded:
            stack.append((p, True))
            stack.extend((o, False) for o in node.left + node.right if o not in memo)
            continue
        left = ",".join(sorted(memo[o] for o in node.left))
        right = ",".join(sorted(memo[o] for o in node.right))
        text = f"{{{left}|{right}}}"
        memo[p] = text if limit is None else text[:limit]

    text = memo[position_id]
    if max_length is not None and len(text) > max_length:
        return text[:max_length] + "..."
    return text
