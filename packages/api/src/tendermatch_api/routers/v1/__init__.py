from fastapi import APIRouter

from tendermatch_api.routers.v1 import matches, private_tenders, tenders

v1_router = APIRouter(prefix="/v1")

v1_router.include_router(tenders.router)
v1_router.include_router(private_tenders.router)
v1_router.include_router(matches.router)
