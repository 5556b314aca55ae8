from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from leadhive.database import get_session
from leadhive.auth.router import get_current_user
from leadhive.users.schemas import UserCreate, UserRead, UserUpdate
from leadhive.users import service
from leadhive.users.models import User

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/", response_model=UserRead)
def register_user(user_create: UserCreate, session: Session = Depends(get_session)):
    if service.get_user_by_email(session, user_create.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    return service.create_user(session, user_create)

@router.get("/me", response_model=UserRead)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user

@router.patch("/me", response_model=UserRead)
def update_current_user(
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return service.update_user(session, current_user, user_update)
