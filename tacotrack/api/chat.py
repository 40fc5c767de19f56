"""
Kitchen chat endpoint
Questions about stock and menu answered by the LLM
"""
from fastapi import APIRouter, Depends, HTTPException

from tacotrack.api.deps import get_data_access, get_llm_service
from tacotrack.schemas import ChatRequest
from tacotrack.services.data_access import DataAccessService
from tacotrack.services.llm_service import LLMService
from tacotrack.utils.logger import log

router = APIRouter(prefix="/api", tags=["chat"])


@router.get("/chat/status")
async def get_chat_status(llm: LLMService = Depends(get_llm_service)):
    """Check if LLM service is available"""
    return {
        "available": llm.is_available(),
        "message": "LLM service is ready" if llm.is_available() else "LLM service not configured"
    }


@router.post("/chat")
async def chat(
    request: ChatRequest,
    data: DataAccessService = Depends(get_data_access),
    llm: LLMService = Depends(get_llm_service),
):
    """
    Ask about stock, orders or the menu.

    Example: {"message": "What do I need to order before Friday?"}
    """
    if not llm.is_available():
        raise HTTPException(
            status_code=503,
            detail="LLM service not available. Configure ANTHROPIC_API_KEY in .env"
        )

    try:
        ingredients = data.ingredients()
        recipes = data.recipes()
    except Exception as e:
        log.error(f"Error loading chat context: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load inventory data")

    answer = llm.chat_about_inventory(request.message, ingredients, recipes)
    if answer is None:
        raise HTTPException(status_code=502, detail="The assistant could not answer right now")

    return {"message": request.message, "response": answer}
