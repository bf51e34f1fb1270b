from fastapi import APIRouter

from api.v1.organizations import router as organizations_router
from api.v1.people import router as people_router

router = APIRouter()

router.include_router(organizations_router, prefix="/v1")
router.include_router(people_router, prefix="/v1")
