from fastapi import APIRouter

from dashboard.api.routes import auth, bot, guilds, pages, settings, system

api_router = APIRouter()
api_router.include_router(system.router, prefix="/system", tags=["system"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(guilds.router, tags=["guilds"])
api_router.include_router(bot.router, prefix="/bot", tags=["bot"])
api_router.include_router(settings.router, prefix="/bot", tags=["settings"])

page_router = APIRouter()
page_router.include_router(pages.router, tags=["pages"])
