from .edit_state import CLEAN, Clean, Editing, EditState
from .fc_model import FCModel, PropertyMapping
from .feed_base import FeedBase
from .feed_searcher import FeedSearcher
from .observer import DBObserver

__all__ = [
    "CLEAN",
    "Clean",
    "DBObserver",
    "EditState",
    "Editing",
    "FCModel",
    "FeedBase",
    "FeedSearcher",
    "PropertyMapping",
]
