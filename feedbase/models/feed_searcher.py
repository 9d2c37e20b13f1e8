"""Query façade that turns rows of one model's table into model instances or plain records."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from feedbase.core.exceptions import FeedContractError, FeedNotFoundError
from feedbase.core.transaction import FeedTransaction
from feedbase.sql.searcher import SQLSearcher
from feedbase.sql.tools import DBTools

if TYPE_CHECKING:
    from .feed_base import FeedBase


class FeedSearcher:
    """
    Searcher bound to one FeedBase subclass.

    The underlying SQLSearcher (see `processor()`) is configured with the
    model's table and columns once, at construction. Build a new FeedSearcher
    per logical query.
    """

    def __init__(self, model_instance: "FeedBase", transaction: FeedTransaction | None = None):
        spec = model_instance.fc_db_spec()
        self._spec = spec
        self._model: type["FeedBase"] = type(model_instance)
        self._tools = DBTools(spec, transaction)
        self._searcher = self._tools.make_searcher()

    def processor(self) -> SQLSearcher:
        return self._searcher

    def _new_feed(self, record: Mapping[str, Any]) -> "FeedBase":
        feed = self._model()
        feed.fc_set_db_protocol(self._spec)
        feed.fc_generate(record)
        return feed

    def format_list(self, items: list[dict[str, Any]], ret_feed: bool = False) -> list[Any]:
        """
        Materialize rows through the model.

        Each row is decoded into a new instance. With `ret_feed` the instance is
        returned, otherwise its re-encoded record, so plain records always look
        exactly like what an instance exposes.
        """
        feeds = [self._new_feed(item) for item in items]
        if ret_feed:
            return feeds
        return [feed.fc_encode() for feed in feeds]

    async def query_single(self, ret_feed: bool = True) -> Any:
        """Return the first matching row (an instance when `ret_feed` is set), or None."""
        items = await self.query_list(0, 1, ret_feed)
        return items[0] if items else None

    async def query_all(self, ret_feed: bool = False) -> list[Any]:
        """Return every matching row; any pagination already configured is dropped."""
        return await self.query_list(-1, 0, ret_feed)

    async def query_list(self, page: int, length: int, ret_feed: bool = False) -> list[Any]:
        """Return one 0-indexed page of rows; `page=-1` returns everything."""
        self._searcher.set_page_info(page, length)
        items = await self._searcher.query_list()
        return self.format_list(items, ret_feed)

    async def query_count(self) -> int:
        """Return the number of rows matching the current conditions, ignoring pagination."""
        return await self._searcher.query_count()

    async def query_one(self) -> "FeedBase | None":
        items = await self.query_list_with_limit_info(0, 1)
        return items[0] if items else None

    async def query_list_with_page_info(self, page: int, length_per_page: int) -> list["FeedBase"]:
        """Return page `page` (0-indexed) of `length_per_page` instances."""
        self._searcher.set_page_info(page, length_per_page)
        items = await self._searcher.query_list()
        return self.format_list(items, True)

    async def query_list_with_limit_info(self, offset: int, length: int) -> list["FeedBase"]:
        """Return up to `length` instances starting at row `offset`."""
        self._searcher.set_limit_info(offset, length)
        items = await self._searcher.query_list()
        return self.format_list(items, True)

    async def query_all_feeds(self) -> list["FeedBase"]:
        """Return instances for the current conditions, keeping any configured pagination."""
        items = await self._searcher.query_list()
        return self.format_list(items, True)

    async def find_with_params(self, params: Mapping[str, Any]) -> "FeedBase | None":
        """Return the first row matching `{column: value}` as an instance, or None."""
        data = await self._tools.make_searcher(params).query_single()
        if data is None:
            return None
        return self._new_feed(data)

    async def prepare_with_params(self, params: Mapping[str, Any]) -> "FeedBase":
        feed = await self.find_with_params(params)
        if feed is None:
            raise FeedNotFoundError(self._model.__name__, dict(params))
        return feed

    def _uid_params(self, uid: str | int) -> dict[str, Any]:
        if not self._spec.is_single_key():
            raise FeedContractError("primary key is not single.", model_name=self._model.__name__)
        return {self._spec.primary_key: uid}

    async def find_with_uid(self, uid: str | int) -> "FeedBase | None":
        """Look up a row by the value of a single-column primary key."""
        return await self.find_with_params(self._uid_params(uid))

    async def prepare_with_uid(self, uid: str | int) -> "FeedBase":
        feed = await self.find_with_uid(uid)
        if feed is None:
            raise FeedNotFoundError(self._model.__name__, self._uid_params(uid))
        return feed

    async def check_exists(self, params: Mapping[str, Any] | str | int) -> bool:
        """
        Return True if a row matches `params`.

        `params` is a `{column: value}` mapping, or a bare uid for single-key models.
        """
        if not isinstance(params, Mapping):
            params = self._uid_params(params)
        return await self._tools.make_searcher(params).query_count() > 0
