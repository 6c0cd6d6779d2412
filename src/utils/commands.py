from typing import Callable, Generic, List, Optional, TypeVar

from logger import logger
from utils.common_models import ActionResult, Notification

T = TypeVar('T')


class RemoveItemCommand(Generic[T]):
    """
    Deletes one item through the backend and mirrors it in a local list.

    The list is only changed after the backend confirms the delete. If the
    call fails, or raises, the list is rolled back to exactly what it was and
    ``notification`` explains why.
    """

    def __init__(
        self,
        items: List[T],
        item_id: str,
        remove: Callable[[str], ActionResult],
        entity_name: str = "Item",
        key: Callable[[T], Optional[str]] = lambda item: getattr(item, 'id', None),
    ):
        self.items = items
        self.item_id = item_id
        self.remove = remove
        self.entity_name = entity_name
        self.key = key
        self.removed: Optional[T] = None
        self.notification: Optional[Notification] = None

    def _index(self) -> Optional[int]:
        return next((i for i, item in enumerate(self.items) if self.key(item) == self.item_id), None)

    def execute(self) -> ActionResult:
        snapshot = list(self.items)
        try:
            result = self.remove(self.item_id)
        except Exception as e:
            logger.exception(f"[REMOVE_COMMAND] Removing {self.entity_name} '{self.item_id}' raised: {e}")
            result = ActionResult.fail(str(e) or f"Failed to delete {self.entity_name.lower()}")

        if not result.success:
            self.items[:] = snapshot
            self.notification = Notification(
                title=f"Error deleting {self.entity_name.lower()}",
                description=result.error,
                level=Notification.Level.ERROR,
            )
            return result

        index = self._index()
        if index is not None:
            self.removed = self.items.pop(index)
        self.notification = Notification(
            title=f"{self.entity_name} deleted",
            description=f"The {self.entity_name.lower()} has been successfully deleted",
            level=Notification.Level.SUCCESS,
        )
        return result
