from typing import List

from logger import logger
from config.config import settings
from database.repository.base_repository import BaseRepository
from lead.lead_model import Lead, LeadStatus
from utils.common_models import ActionResult


class LeadManager(BaseRepository[Lead]):
    model = Lead
    collection = settings.GCP.Firestore.LEADS_COLLECTION_NAME
    order_by = 'createdAt'
    descending = True
    entity_name = "Lead"

    def list_leads(self) -> ActionResult[List[Lead]]:
        return self.get_all()

    def get_lead(self, lead_id: str) -> ActionResult[Lead]:
        return self.get_by_id(lead_id)

    def add_lead(self, lead: Lead) -> ActionResult[str]:
        if not lead.status:
            lead = lead.model_copy(update={'status': LeadStatus.NEW})
        return self.create(lead)

    def update_lead(self, lead_id: str, lead: Lead) -> ActionResult[str]:
        return self.update(lead_id, lead)

    def update_lead_status(self, lead_id: str, status: str) -> ActionResult[str]:
        try:
            new_status = LeadStatus(status)
        except ValueError:
            logger.warning(f"[LEAD_MANAGER] Rejected status '{status}' for lead '{lead_id}'")
            return ActionResult.fail(f"Invalid lead status: {status}")
        return self.update(lead_id, {'status': new_status.value})

    def delete_lead(self, lead_id: str) -> ActionResult[str]:
        return self.delete(lead_id)
