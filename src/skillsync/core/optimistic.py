"""Optimistic state updates with compensating rollback."""

from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


async def with_optimistic_update(
    apply: Callable[[], None],
    persist: Callable[[], Awaitable[T]],
    rollback: Callable[[], None],
) -> T:
    """
    Apply a state change before persisting it, undoing it if persistence fails.

    ``apply`` and ``rollback`` are synchronous, so nothing else can run on the
    event loop between the optimistic change and either its confirmation or
    its rollback other than ``persist`` itself.

    Args:
        apply: Applies the new state to shared in-memory state
        persist: Coroutine factory that persists the new state
        rollback: Restores the state captured before ``apply``

    Returns:
        Whatever ``persist`` returns

    Raises:
        Whatever ``persist`` raises, after ``rollback`` has run
    """
    apply()
    try:
        return await persist()
    except BaseException:
        rollback()
        raise
