from __future__ import annotations

from typing import Optional

from ..exceptions import AnalysisCancelledError


class CancellationToken:
    """
    Cooperative cancellation flag handed to long-running analyses.

    The analysis calls :meth:`raise_if_cancelled` at its check points;
    after :meth:`cancel` the next check raises
    :class:`~petrikit.exceptions.AnalysisCancelledError`.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise AnalysisCancelledError("Analysis was cancelled.")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Check point helper accepting ``None`` for "not cancellable"."""
    if token is not None:
        token.raise_if_cancelled()
