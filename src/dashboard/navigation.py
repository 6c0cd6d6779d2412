from pydantic import BaseModel

class NavRoute(BaseModel):
    label: str
    path: str
    icon: str

    def is_active(self, current_path: str) -> bool:
        if self.path == HOME_PATH:
            return current_path.rstrip('/') == HOME_PATH
        return current_path.startswith(self.section)

    @property
    def section(self) -> str:
        # /dashboard/properties/dashboard highlights for every /dashboard/properties page
        parts = self.path.strip('/').split('/')
        return '/' + '/'.join(parts[:2])


HOME_PATH = "/dashboard"

NAV_ROUTES = [
    NavRoute(label="Dashboard", path=HOME_PATH, icon="🏠"),
    NavRoute(label="Properties", path="/dashboard/properties/dashboard", icon="🏢"),
    NavRoute(label="Leads", path="/dashboard/leads", icon="👥"),
    NavRoute(label="Banners", path="/dashboard/banners", icon="🖼️"),
    NavRoute(label="Property Headings", path="/dashboard/headings", icon="📑"),
    NavRoute(label="Go Green", path="/dashboard/go-green", icon="🌱"),
    NavRoute(label="Blog", path="/dashboard/blog", icon="📝"),
    NavRoute(label="Settings", path="/dashboard/settings", icon="⚙️"),
]
