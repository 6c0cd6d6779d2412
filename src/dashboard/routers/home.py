from fastapi import APIRouter, Depends, Request

from account.account_model import AdminSession
from account.authentication import require_session
from dashboard.templating import render
from gcp.backend import Backend, get_backend
from property.property_filter import property_stats
from utils.common_models import Notification

router = APIRouter()


@router.get("")
async def dashboard_home(
    request: Request,
    session: AdminSession = Depends(require_session),
    backend: Backend = Depends(get_backend)
):
    notifications = []
    properties = backend.properties.list_properties()
    leads = backend.leads.list_leads()
    visitors = backend.metrics.visitor_count()
    for result, what in ((properties, "properties"), (leads, "leads"), (visitors, "visitor count")):
        if not result.success:
            notifications.append(Notification(
                title=f"Could not load {what}",
                description=result.error,
                level=Notification.Level.ERROR
            ))

    return render(request, "home.html", {
        'session': session,
        'stats': property_stats(properties.data or []),
        'lead_count': len(leads.data or []),
        'recent_leads': (leads.data or [])[:5],
        'visitors': visitors.data if visitors.success else None,
    }, notifications=notifications)
