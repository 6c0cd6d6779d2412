from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from account.account_model import AdminSession
from account.authentication import require_session
from dashboard.templating import render

router = APIRouter()


class SettingsCard(BaseModel):
    title: str
    description: str
    path: str
    icon: str


SETTINGS_CARDS = [
    SettingsCard(title="Property Headings", description="Fields shown on property pages", path="/dashboard/headings", icon="📑"),
    SettingsCard(title="Banners", description="Homepage banners and their schedule", path="/dashboard/banners", icon="🖼️"),
    SettingsCard(title="Blog", description="Posts, categories and publishing", path="/dashboard/blog", icon="📝"),
    SettingsCard(title="Go Green", description="Campaign entries", path="/dashboard/go-green", icon="🌱"),
]


@router.get("")
async def settings_index(request: Request, session: AdminSession = Depends(require_session)):
    return render(request, "settings.html", {'cards': SETTINGS_CARDS, 'session': session})
