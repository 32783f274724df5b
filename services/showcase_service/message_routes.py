from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from database import get_db
from schemas import (
    MessageSend, FindConversationRequest, ChatMessageResponse, SendMessageResponse,
    UserConversation, ConversationEnvelope, MessageResponse
)
from crud import (
    get_user_by_id, user_summary, create_message, get_thread, has_thread, mark_thread_read,
    mark_message_read, delete_message, get_user_conversations, message_to_dict
)
from conversations import ConversationKey
from auth import get_current_user
from models import User
from typing import List

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/conversations", response_model=List[UserConversation])
def list_conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_user_conversations(db, current_user.id)


@router.get("/conversation/{other_user_id}", response_model=List[ChatMessageResponse])
def get_conversation(
    other_user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    thread = [message_to_dict(message) for message in get_thread(db, current_user.id, other_user_id)]
    mark_thread_read(db, current_user.id, other_user_id)
    return thread


@router.post("/send", response_model=SendMessageResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: MessageSend,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    content = payload.content.strip()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message content is required")
    if payload.recipient_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot send a message to yourself")
    if not get_user_by_id(db, payload.recipient_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipient not found")

    message = create_message(db, current_user.id, payload.recipient_id, content)
    return {
        "message": message_to_dict(message),
        "conversation_id": str(ConversationKey(counterpart_id=payload.recipient_id)),
    }


@router.post("/conversation/find", response_model=ConversationEnvelope)
def find_conversation(
    payload: FindConversationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if payload.other_user_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Other user ID is required")
    other_user = get_user_by_id(db, payload.other_user_id)
    if not other_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    # No row is created here: a thread exists once its first message is sent
    is_new = not has_thread(db, current_user.id, other_user.id)
    conversation_id = f"new-{other_user.id}" if is_new else str(ConversationKey(counterpart_id=other_user.id))
    return {
        "conversation": {
            "id": conversation_id,
            "other_user_id": other_user.id,
            "other_user": user_summary(other_user),
            "messages": [],
            "is_new": is_new,
        }
    }


@router.patch("/conversation/{other_user_id}/read")
def mark_conversation_read(
    other_user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    updated = mark_thread_read(db, current_user.id, other_user_id)
    return {"message": "Messages marked as read", "updated": updated}


@router.patch("/message/{message_id}/read", response_model=ChatMessageResponse)
def mark_single_message_read(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    message = mark_message_read(db, message_id, current_user.id)
    if not message:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found or unauthorized")
    return message_to_dict(message)


@router.delete("/message/{message_id}", response_model=MessageResponse)
def delete_single_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not delete_message(db, message_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found or unauthorized")
    return MessageResponse(message="Message deleted successfully")
