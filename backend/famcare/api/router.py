from fastapi import APIRouter

from famcare.api.auth import router as auth_router
from famcare.api.families import router as families_router
from famcare.api.features import router as features_router
from famcare.api.users import router as users_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(families_router)
api_router.include_router(features_router)
api_router.include_router(users_router)
