from fastapi import APIRouter

from leadflow.api.routes import health, questionnaire

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(questionnaire.router, prefix="/questionnaire", tags=["questionnaire"])
