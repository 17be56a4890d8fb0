from fastapi import APIRouter, Depends, HTTPException, status

from ...api.deps import get_chatbot
from ...services.chatbot_service import ChatbotService
from ...schemas.reports import ChatRequest, ChatResponse

router = APIRouter(prefix="/api", tags=["Chatbot"])

@router.post("/chatbot", response_model=ChatResponse)
async def chat(
    chat_request: ChatRequest,
    chatbot: ChatbotService = Depends(get_chatbot)
):
    """Answer a message from the health assistant."""
    if not chat_request.message.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message cannot be empty"
        )

    intent, response = chatbot.reply(chat_request.message)
    return ChatResponse(response=response, intent=intent)
