"""In-memory group cache for a single client."""
import copy
import logging
from collections import OrderedDict
from typing import Optional

logger = logging.getLogger(__name__)


class GroupCache:
    """Bounded LRU cache of Edusign groups keyed by group ID."""

    def __init__(self, max_size: int = 32):
        self.max_size = max_size
        self._groups: "OrderedDict[str, dict]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, group_uid: str) -> bool:
        return group_uid in self._groups

    def get(self, group_uid: str) -> Optional[dict]:
        """Получить группу из кэша (копию, чтобы вызывающий код не портил кэш)."""
        group = self._groups.get(group_uid)
        if group is None:
            return None
        self._groups.move_to_end(group_uid)
        logger.debug("Group cache hit: %s", group_uid)
        return copy.deepcopy(group)

    def set(self, group_uid: str, group: dict) -> None:
        if self.max_size <= 0:
            return
        self._groups[group_uid] = copy.deepcopy(group)
        self._groups.move_to_end(group_uid)
        while len(self._groups) > self.max_size:
            evicted, _ = self._groups.popitem(last=False)
            logger.debug("Group cache evicted: %s", evicted)

    def invalidate(self, group_uid: str) -> None:
        """Удалить группу из кэша (после изменения на стороне Edusign)."""
        self._groups.pop(group_uid, None)

    def clear(self) -> None:
        self._groups.clear()
