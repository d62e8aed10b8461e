"""
FastAPI routers grouped by domain (auth, dashboard, public pages, slug).

Each module exposes an APIRouter that bizcard.app includes.
"""
