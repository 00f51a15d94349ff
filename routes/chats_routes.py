from fastapi import APIRouter, Depends, HTTPException, status

from services.chats_service import (
    list_chats_service,
    open_chat_service,
    send_message_service,
    start_chat_service,
)
from utils.schemas_ut import ChatDetailOut, ChatListOut, ChatMessageCreate
from utils.security_ut import get_current_user

router = APIRouter()


@router.get("/chats", response_model=ChatListOut)
async def list_chats(user=Depends(get_current_user)):
    return await list_chats_service(user)


@router.post("/products/{product_id}/chat", response_model=ChatDetailOut)
async def start_chat(product_id: int, user=Depends(get_current_user)):
    try:
        return await start_chat_service(user, product_id)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/chats/{chat_id}", response_model=ChatDetailOut)
async def open_chat(chat_id: int, user=Depends(get_current_user)):
    try:
        return await open_chat_service(user, chat_id)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except PermissionError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post("/chats/{chat_id}/messages", response_model=ChatDetailOut, status_code=201)
async def send_message(chat_id: int, payload: ChatMessageCreate, user=Depends(get_current_user)):
    try:
        return await send_message_service(user, chat_id, payload.text)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except PermissionError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
