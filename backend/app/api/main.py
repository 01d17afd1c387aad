from fastapi import APIRouter

from app.api.routes import auth, backups, pm2, utils

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(backups.router)
api_router.include_router(pm2.router)
api_router.include_router(utils.router)
