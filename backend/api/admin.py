# Role: Administration of the authorized-user list (list / read / create / update / delete).
# Only users in this list can start intake conversations.

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from backend.api.deps import get_store
from backend.api.schemas import Envelope, UserOut
from backend.core.conversation_store import ConversationStore
from backend.core.errors import ConflictError, UserNotFoundError
from backend.models.user import UserCreate, UserUpdate
from backend.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=Envelope[List[UserOut]])
def list_users(store: ConversationStore = Depends(get_store)) -> Envelope[List[UserOut]]:
    return Envelope(data=[UserOut.from_user(u) for u in store.list_users()])


@router.get("/users/{user_id}", response_model=Envelope[UserOut])
def get_user(user_id: int, store: ConversationStore = Depends(get_store)) -> Envelope[UserOut]:
    user = store.get_user(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return Envelope(data=UserOut.from_user(user))


@router.post("/users", response_model=Envelope[UserOut], status_code=status.HTTP_201_CREATED)
def create_user(req: UserCreate, store: ConversationStore = Depends(get_store)) -> Envelope[UserOut]:
    if store.get_user_by_email(req.email) is not None:
        raise ConflictError("A user with this email already exists", {"email": req.email})

    user = store.create_user(req.email, req.name)
    logger.info(f"Created user {user.id}")
    return Envelope(message="User created successfully", data=UserOut.from_user(user))


@router.put("/users/{user_id}", response_model=Envelope[UserOut])
def update_user(user_id: int, req: UserUpdate, store: ConversationStore = Depends(get_store)) -> Envelope[UserOut]:
    if store.get_user(user_id) is None:
        raise UserNotFoundError(user_id)

    # Key line: changing the email must not collide with another user's address.
    if req.email is not None:
        owner = store.get_user_by_email(req.email)
        if owner is not None and owner.id != user_id:
            raise ConflictError("A user with this email already exists", {"email": req.email})

    user = store.update_user(user_id, email=req.email, name=req.name)
    return Envelope(message="User updated successfully", data=UserOut.from_user(user))


@router.delete("/users/{user_id}", response_model=Envelope[UserOut])
def delete_user(user_id: int, store: ConversationStore = Depends(get_store)) -> Envelope[UserOut]:
    # Removes the user together with their conversations and transcripts.
    user = store.get_user(user_id)
    if user is None or not store.delete_user(user_id):
        raise UserNotFoundError(user_id)
    logger.info(f"Deleted user {user_id}")
    return Envelope(message="User deleted successfully", data=UserOut.from_user(user))
