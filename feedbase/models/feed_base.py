"""Active-record base class: lifecycle, change tracking and lookups of one table row."""

import logging
from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

from feedbase.core import config
from feedbase.core.exceptions import FeedContractError, FeedNotFoundError
from feedbase.core.transaction import FeedTransaction
from feedbase.functions import filter_functions
from feedbase.sql.db_spec import DBProtocol, DBProtocolV2, DBSpec
from feedbase.sql.searcher import SQLSearcher
from feedbase.sql.tools import DBTools

from .edit_state import CLEAN, EditState, Editing
from .fc_model import FCModel
from .feed_searcher import FeedSearcher
from .observer import DBObserver

logger = logging.getLogger(__name__)

FeedT = TypeVar("FeedT", bound="FeedBase")


class FeedBase(FCModel):
    """
    A model instance bound to one row of the table its descriptor names.

    Lifecycle:

    1. Build an instance empty, or load one through `find_one()` /
       `fc_searcher()` (rows are decoded with `fc_generate()`).
    2. `fc_add()` inserts it. `fc_delete()` removes the row by primary key.
    3. `fc_edit()` captures a snapshot; attribute changes made afterwards are
       diffed against it by `fc_update()`, which writes only the changed
       columns plus the primary key and returns the diff.

    Class-level configuration:

    - `__db_protocol__`: the storage descriptor (`DBProtocolV2` or a `DBProtocol`).
    - `__property_mapper__`: `{attribute: column}`.
    - `__reload_on_added__` / `__reload_on_updated__`: re-read the row after writing.
    - `__strict_mode__`: policy for a missing descriptor; None defers to `FEEDBASE_STRICT_MODE`.
    - `__db_observer__`: observer used when none is passed to the constructor.

    An instance assumes a single writer: two tasks editing it concurrently
    overwrite each other's snapshot.
    """

    __db_protocol__: ClassVar[DBProtocol | DBProtocolV2 | None] = None
    __reload_on_added__: ClassVar[bool] = False
    __reload_on_updated__: ClassVar[bool] = False
    __strict_mode__: ClassVar[bool | None] = None
    __db_observer__: ClassVar[DBObserver | None] = None

    def __init__(self, db_observer: DBObserver | None = None) -> None:
        super().__init__()
        self.db_observer: DBObserver | None = db_observer or self.__db_observer__
        self._db_spec: DBSpec | None = None
        self._edit_state: EditState = CLEAN

    # --- Descriptor ---

    def fc_set_db_protocol(self, protocol: DBProtocol | DBProtocolV2 | DBSpec) -> None:
        """Bind this instance to a descriptor other than the class default."""
        self._db_spec = DBSpec.from_protocol(protocol)

    def fc_update_db_protocol(self, **extras: Any) -> None:
        """Replace some fields of this instance's descriptor, e.g. `table="demo_table_2024"`."""
        self._db_spec = self.fc_db_spec().copy_with(**extras)

    def _resolve_db_spec(self) -> DBSpec | None:
        if self._db_spec is None and self.__db_protocol__ is not None:
            self._db_spec = DBSpec.from_protocol(self.__db_protocol__)
        return self._db_spec

    def fc_db_spec(self) -> DBSpec:
        """Return the descriptor; a model without one is a contract violation."""
        spec = self._resolve_db_spec()
        if spec is None:
            raise FeedContractError("storage descriptor must not be empty", model_name=type(self).__name__)
        return spec

    @classmethod
    def fc_is_strict(cls) -> bool:
        if cls.__strict_mode__ is not None:
            return cls.__strict_mode__
        return config.settings.STRICT_MODE

    def _persistence_spec(self, operation: str) -> DBSpec | None:
        """Descriptor for a persistence call, or None when the call should be skipped in permissive mode."""
        spec = self._resolve_db_spec()
        if spec is None and not self.fc_is_strict():
            logger.warning("%s has no storage descriptor; skipping %s.", type(self).__name__, operation)
            return None
        return spec or self.fc_db_spec()

    # --- Identity ---

    def fc_uid_str(self) -> str:
        """
        Return the identity of the current state as a string.

        A single key yields its value; a composite key yields its values joined
        with ',' in declaration order.
        """
        data = self.fc_encode()
        return ",".join(f"{data.get(key)}" for key in self.fc_db_spec().primary_keys())

    def _key_params(self) -> dict[str, Any]:
        data = self.fc_encode()
        return {key: data.get(key) for key in self.fc_db_spec().primary_keys()}

    # --- Editing state ---

    @property
    def fc_is_editing(self) -> bool:
        return isinstance(self._edit_state, Editing)

    @property
    def fc_data_backup(self) -> dict[str, Any] | None:
        """The snapshot taken by `fc_edit()`, or None outside an edit session."""
        if isinstance(self._edit_state, Editing):
            return dict(self._edit_state.snapshot)
        return None

    def fc_edit(self) -> None:
        """
        Enter editing mode by capturing the current column values.

        Calling it again replaces the earlier snapshot.
        """
        self._edit_state = Editing(self.fc_encode())

    def fc_cancel_edit(self) -> None:
        """Leave editing mode without writing anything."""
        self._edit_state = CLEAN

    def fc_check_key_changed(self, column: str) -> bool:
        """
        Return True if `column` held a truthy value in the snapshot that differs from the current value.

        Always False outside an edit session or for unmapped columns.
        """
        if not isinstance(self._edit_state, Editing):
            return False
        attribute = self.fc_mapping().attribute_for(column)
        if attribute is None:
            return False
        before = self._edit_state.snapshot.get(column)
        return bool(before) and before != getattr(self, attribute, None)

    def fc_compute_diff(self) -> dict[str, dict[str, Any]]:
        """Return `{column: {"before", "after"}}` for every snapshot column whose value changed."""
        if not isinstance(self._edit_state, Editing):
            raise FeedContractError("You must use fc_edit before fc_update!", model_name=type(self).__name__)
        snapshot = self._edit_state.snapshot
        edited_map: dict[str, dict[str, Any]] = {}
        for column, value in self.fc_encode().items():
            if column not in snapshot:
                continue
            if snapshot[column] == value:
                continue
            edited_map[column] = {"before": snapshot[column], "after": value}
        return edited_map

    # --- Persistence ---

    async def fc_add(self, transaction: FeedTransaction | None = None) -> None:
        """
        Insert the current state as a new row.

        With a single primary key whose attribute is unset, the identifier
        generated by the database is written back onto the attribute.
        """
        spec = self._persistence_spec("add")
        if spec is None:
            return
        tools = DBTools(spec, transaction)
        last_insert_id = await tools.make_adder(self.fc_encode()).execute()
        self._update_auto_increment_info(spec, last_insert_id)
        logger.debug("Added %s (%s)", type(self).__name__, self.fc_uid_str())
        await self._after_add(transaction)

    async def fc_strong_add(self, transaction: FeedTransaction | None = None) -> None:
        """Insert the current state, overwriting the row that already holds the same primary key."""
        spec = self._persistence_spec("strong add")
        if spec is None:
            return
        await DBTools(spec, transaction).strong_add(self.fc_encode())
        await self._after_add(transaction)

    async def fc_weak_add(self, transaction: FeedTransaction | None = None) -> None:
        """Insert the current state unless a row with the same primary key already exists."""
        spec = self._persistence_spec("weak add")
        if spec is None:
            return
        await DBTools(spec, transaction).weak_add(self.fc_encode())
        await self._after_add(transaction)

    def _update_auto_increment_info(self, spec: DBSpec, last_insert_id: Any) -> None:
        if not last_insert_id or not spec.is_single_key():
            return
        attribute = self.fc_mapping().attribute_for(spec.primary_key)
        if attribute is not None and getattr(self, attribute, None) is None:
            setattr(self, attribute, last_insert_id)

    async def _after_add(self, transaction: FeedTransaction | None) -> None:
        if self.__reload_on_added__:
            await self.fc_reload(transaction)
        if self.db_observer is not None:
            await self.db_observer.on_add(self)

    async def fc_update(
        self, options: Mapping[str, Any] | None = None, transaction: FeedTransaction | None = None
    ) -> dict[str, dict[str, Any]]:
        """
        Write the changes made since `fc_edit()` and return them.

        `options` is keyed by column name; each entry whose column is mapped is
        assigned to its attribute before diffing. Only changed columns and the
        primary key are sent. When nothing changed no statement is issued and
        an empty dict is returned. The edit session ends once the write
        succeeds; if the executor raises, it stays open.

        Raises:
            FeedContractError: If `fc_edit()` was not called first.

        """
        if not isinstance(self._edit_state, Editing):
            raise FeedContractError("You must use fc_edit before fc_update!", model_name=type(self).__name__)

        spec = self._persistence_spec("update")
        if spec is None:
            return {}

        mapping = self.fc_mapping()
        for column, value in (options or {}).items():
            attribute = mapping.attribute_for(column)
            if attribute is not None:
                setattr(self, attribute, value)

        old_data = dict(self._edit_state.snapshot)
        edited_map = self.fc_compute_diff()
        if not edited_map:
            logger.info("%s (%s) has no changes; skipping update.", type(self).__name__, self.fc_uid_str())
            self._edit_state = CLEAN
            return {}

        data = self.fc_encode()
        params = {column: change["after"] for column, change in edited_map.items()}
        for key in spec.primary_keys():
            params[key] = data.get(key)

        await DBTools(spec, transaction).make_modifier(params).execute()
        self._edit_state = CLEAN
        logger.debug("Updated %s (%s): %s", type(self).__name__, self.fc_uid_str(), sorted(edited_map))

        if self.__reload_on_updated__:
            await self.fc_reload(transaction)
        if self.db_observer is not None:
            await self.db_observer.on_update(self, edited_map, old_data)
        return edited_map

    async def fc_delete(self, transaction: FeedTransaction | None = None) -> None:
        """Remove the row holding this instance's primary key. The editing state is left as is."""
        spec = self._persistence_spec("delete")
        if spec is None:
            return
        await DBTools(spec, transaction).make_remover(self.fc_encode()).execute()
        logger.debug("Deleted %s (%s)", type(self).__name__, self.fc_uid_str())
        if self.db_observer is not None:
            await self.db_observer.on_delete(self)

    async def fc_reload(self: FeedT, transaction: FeedTransaction | None = None) -> FeedT:
        """Re-read the row by primary key; the instance is left unchanged if the row is gone."""
        if self._persistence_spec("reload") is None:
            return self
        feed = await self.fc_find_in_db(transaction)
        if feed is not None:
            self.fc_generate(feed.fc_encode())
        return self

    async def fc_find_in_db(self: FeedT, transaction: FeedTransaction | None = None) -> FeedT | None:
        """Return a fresh instance loaded from the row holding this instance's primary key."""
        spec = self.fc_db_spec()
        data = await DBTools(spec, transaction).make_searcher(self._key_params()).query_single()
        if data is None:
            return None
        feed = type(self)()
        feed.fc_set_db_protocol(spec)
        feed.fc_generate(data)
        return feed

    async def fc_check_exists(self, transaction: FeedTransaction | None = None) -> bool:
        return await self.fc_find_in_db(transaction) is not None

    # --- Searching ---

    def fc_searcher(
        self, params: Mapping[str, Any] | None = None, transaction: FeedTransaction | None = None
    ) -> FeedSearcher:
        """Return a FeedSearcher for this model class configured from a filter request."""
        searcher = FeedSearcher(self, transaction)
        filter_functions.apply_filter_options(searcher.processor(), params or {}, self.fc_mapping())
        return searcher

    def fc_clean_filter_params(self, params: Mapping[str, Any]) -> dict[str, Any]:
        return filter_functions.clean_filter_params(params, self.fc_mapping())

    @classmethod
    def db_searcher(
        cls, params: Mapping[str, Any] | None = None, transaction: FeedTransaction | None = None
    ) -> SQLSearcher:
        """Return a raw SQLSearcher over this model's table filtered by `{column: value}`."""
        return DBTools(cls().fc_db_spec(), transaction).make_searcher(params)

    @classmethod
    async def find_one(
        cls: type[FeedT], params: Mapping[str, Any], transaction: FeedTransaction | None = None
    ) -> FeedT | None:
        """Return the first row matching `{column: value}` as an instance, or None."""
        if not isinstance(params, Mapping):
            raise FeedContractError("params must be a mapping.", model_name=cls.__name__)
        feed = cls()
        data = await DBTools(feed.fc_db_spec(), transaction).make_searcher(params).query_single()
        if data is None:
            return None
        feed.fc_generate(data)
        return feed

    @classmethod
    async def prepare_one(
        cls: type[FeedT], params: Mapping[str, Any], transaction: FeedTransaction | None = None
    ) -> FeedT:
        """Like `find_one`, but a missing row raises FeedNotFoundError."""
        feed = await cls.find_one(params, transaction)
        if feed is None:
            raise FeedNotFoundError(cls.__name__, dict(params))
        return feed

    @classmethod
    async def find_with_uid(
        cls: type[FeedT], uid: str | int, transaction: FeedTransaction | None = None
    ) -> FeedT | None:
        """Look up a row by the value of a single-column primary key."""
        spec = cls().fc_db_spec()
        return await cls.find_one({spec.primary_key: uid}, transaction)

    @classmethod
    async def prepare_with_uid(
        cls: type[FeedT], uid: str | int, transaction: FeedTransaction | None = None
    ) -> FeedT:
        """Like `find_with_uid`, but a missing row raises FeedNotFoundError."""
        feed = await cls.find_with_uid(uid, transaction)
        if feed is None:
            raise FeedNotFoundError(cls.__name__, {cls().fc_db_spec().primary_key: uid})
        return feed

    @classmethod
    async def count(
        cls, params: Mapping[str, Any] | None = None, transaction: FeedTransaction | None = None
    ) -> int:
        """Return the number of rows matching `{column: value}`."""
        return await cls.db_searcher(params, transaction).query_count()
