from fastapi import APIRouter

from app.ai.config import load_ai_config

router = APIRouter()


@router.get("/health", summary="Health Check", description="Report liveness and the configured AI provider.")
async def health_check():
    ai_config = load_ai_config()
    return {"status": "healthy", "aiProvider": ai_config.provider, "aiModel": ai_config.model}
