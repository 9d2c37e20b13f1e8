from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .feed_base import FeedBase


@runtime_checkable
class DBObserver(Protocol):
    """
    Receives a notification after each successful persistence call of a model.

    Hooks run only once the executor has reported success, so a failed write
    never notifies. `on_update` receives the `{column: {"before", "after"}}`
    diff and the snapshot taken by `fc_edit()`.
    """

    async def on_add(self, new_feed: "FeedBase") -> None: ...

    async def on_update(
        self, new_feed: "FeedBase", changed_map: dict[str, dict[str, Any]], old_data: dict[str, Any] | None = None
    ) -> None: ...

    async def on_delete(self, old_feed: "FeedBase") -> None: ...
