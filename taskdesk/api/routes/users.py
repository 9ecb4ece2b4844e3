from typing import List
from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from taskdesk.api.deps import Access, get_access, get_current_identity, may_choose_role
from taskdesk.core.errors import Forbidden, Unauthenticated
from taskdesk.db.session import get_db
from taskdesk.models.user import User
from taskdesk.schemas.auth import Identity, LoginOut, Token, UserLogin, UserRegister
from taskdesk.schemas.user import UserCreate, UserOut, UserUpdate
from taskdesk.services import auth as auth_service
from taskdesk.services import users as user_service

router = APIRouter()

@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, choose_role: bool = Depends(may_choose_role), db: Session = Depends(get_db)):
    """Public sign-up. Only an admin (or open mode) may register a non-employee account."""
    return auth_service.register(db, payload, allow_role=choose_role)

@router.post("/login", response_model=LoginOut)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    """JSON login. Returns the token together with what the client needs to route itself."""
    return auth_service.login(db, payload.email, payload.password)

@router.post("/token", response_model=Token)
def login_form(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """OAuth2 password form login (used by the interactive docs). Same rules as /login."""
    result = auth_service.login(db, form_data.username, form_data.password)
    return {"access_token": result.token, "token_type": "bearer"}

# /me and /employees must be declared before /{user_id}
@router.get("/me", response_model=UserOut)
def me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    user = db.get(User, identity.id)
    if not user:
        # token outlived its user
        raise Unauthenticated("User no longer exists")
    return user

@router.get("/employees", response_model=List[UserOut])
def employees(_identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return user_service.list_employees(db)

@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_user(payload: UserCreate, access: Access = Depends(get_access), db: Session = Depends(get_db)):
    access.require_admin()
    return user_service.create_user(db, payload)

@router.get("", response_model=List[UserOut])
@router.get("/", response_model=List[UserOut], include_in_schema=False)
def list_users(access: Access = Depends(get_access), db: Session = Depends(get_db)):
    access.require_admin()
    return user_service.list_users(db)

@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, access: Access = Depends(get_access), db: Session = Depends(get_db)):
    access.require_admin_or_self(user_id)
    return user_service.get_user(db, user_id)

@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserUpdate, access: Access = Depends(get_access), db: Session = Depends(get_db)):
    access.require_admin_or_self(user_id)
    if payload.role is not None and access.enforced and not access.is_admin:
        raise Forbidden("Only an admin can change roles")
    return user_service.update_user(db, user_id, payload)

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, access: Access = Depends(get_access), db: Session = Depends(get_db)):
    access.require_admin()
    user_service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
