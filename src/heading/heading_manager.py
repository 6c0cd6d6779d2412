from typing import List

from logger import logger
from config.config import settings
from database.repository.base_repository import BaseRepository
from heading.heading_model import PropertyHeading
from utils.common_models import ActionResult, CaseInsensitiveEnum


class MoveDirection(str, CaseInsensitiveEnum):
    UP = 'up'
    DOWN = 'down'


class HeadingManager(BaseRepository[PropertyHeading]):
    model = PropertyHeading
    collection = settings.GCP.Firestore.HEADINGS_COLLECTION_NAME
    order_by = 'order'
    entity_name = "Property heading"

    def list_headings(self) -> ActionResult[List[PropertyHeading]]:
        return self.get_all()

    def get_heading(self, heading_id: str) -> ActionResult[PropertyHeading]:
        return self.get_by_id(heading_id)

    def add_heading(self, heading: PropertyHeading) -> ActionResult[str]:
        return self.create(heading)

    def update_heading(self, heading_id: str, heading: PropertyHeading) -> ActionResult[str]:
        return self.update(heading_id, heading)

    def delete_heading(self, heading_id: str) -> ActionResult[str]:
        return self.delete(heading_id)

    def move_heading(self, heading: PropertyHeading, direction: str) -> ActionResult[str]:
        """
        Shifts the heading's order by one. Only the moved heading is written,
        so neighbours may end up sharing an order value.
        """
        try:
            move = MoveDirection(direction)
        except ValueError:
            return ActionResult.fail(f"Invalid direction: {direction}")

        new_order = max(1, heading.order - 1) if move == MoveDirection.UP else heading.order + 1
        logger.info(f"[HEADING_MANAGER] Moving heading '{heading.id}' {move.value}: {heading.order} -> {new_order}")
        return self.update(heading.id, {'order': new_order})
