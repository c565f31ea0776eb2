# campusconnect/routes/users.py
import logging
import math
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from campusconnect import models, schemas, database, auth
from campusconnect.database import paginate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"]
)


def _get_user_or_404(db: Session, user_id: int) -> models.User:
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

# User Registration (always a student; admins promote)
@router.post("/register", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
def register_user(user: schemas.UserCreate, db: Session = Depends(database.get_db)):
    email = user.email.lower()
    existing_user = db.query(models.User).filter(models.User.email == email).first()
    if existing_user:
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = models.User(
        name=user.name.strip(),
        email=email,
        password=auth.get_password_hash(user.password),
        student_id=user.student_id.strip(),
        department=user.department.strip(),
        role=models.Role.STUDENT.value
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("User %s registered", new_user.email)
    return new_user

# User Login (JWT)
@router.post("/login")
def login_user(user: schemas.UserLogin, db: Session = Depends(database.get_db)):
    db_user = db.query(models.User).filter(models.User.email == user.email.lower()).first()
    if not db_user or not auth.verify_password(user.password, db_user.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not db_user.is_active:
        raise HTTPException(status_code=403, detail="Account is deactivated. Contact an administrator.")

    access_token = auth.create_access_token(data={
        "sub": db_user.email,
        "role": db_user.role
    })
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": schemas.UserOut.model_validate(db_user)
    }

@router.get("/me", response_model=schemas.UserOut)
def read_me(current_user: models.User = Depends(auth.get_current_user)):
    return current_user

# Admin Only - List Users
@router.get("/", response_model=schemas.UserPage, dependencies=[Depends(auth.verify_admin_user)])
def list_users(
    role: Optional[models.Role] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(database.get_db)
):
    query = db.query(models.User).filter(models.User.is_active.is_(True))
    if role:
        query = query.filter(models.User.role == role.value)
    if department:
        query = query.filter(models.User.department.ilike(f"%{department}%"))
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            models.User.name.ilike(pattern),
            models.User.email.ilike(pattern),
            models.User.student_id.ilike(pattern)
        ))

    users, total = paginate(query.order_by(models.User.created_at.desc(), models.User.id.desc()), page, limit)
    return {
        "data": users,
        "pagination": {"current": page, "pages": math.ceil(total / limit), "total": total}
    }

# Admin Only - User Statistics
@router.get("/stats/overview", response_model=schemas.UserStats, dependencies=[Depends(auth.verify_admin_user)])
def user_stats(db: Session = Depends(database.get_db)):
    active = db.query(models.User).filter(models.User.is_active.is_(True))

    departments = db.query(models.User.department, func.count(models.User.id))\
        .filter(models.User.is_active.is_(True))\
        .group_by(models.User.department)\
        .order_by(func.count(models.User.id).desc())\
        .all()

    return schemas.UserStats(
        total_users=active.count(),
        total_students=active.filter(models.User.role == models.Role.STUDENT.value).count(),
        total_faculty=active.filter(models.User.role == models.Role.FACULTY.value).count(),
        total_admins=active.filter(models.User.role == models.Role.ADMIN.value).count(),
        inactive_users=db.query(models.User).filter(models.User.is_active.is_(False)).count(),
        departments=[{"department": name, "count": count} for name, count in departments]
    )

# Admin Only - Get User
@router.get("/{user_id}", response_model=schemas.UserOut, dependencies=[Depends(auth.verify_admin_user)])
def get_user(user_id: int, db: Session = Depends(database.get_db)):
    return _get_user_or_404(db, user_id)

# Admin Only - Change Role
@router.patch("/{user_id}/role", response_model=schemas.UserOut)
def update_user_role(
    user_id: int,
    update: schemas.RoleUpdate,
    db: Session = Depends(database.get_db),
    admin: models.User = Depends(auth.verify_admin_user)
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot change your own role")

    user = _get_user_or_404(db, user_id)
    user.role = update.role.value
    db.commit()
    db.refresh(user)
    logger.info("User %s is now %s (by %s)", user.email, user.role, admin.email)
    return user

# Admin Only - Deactivate User
@router.patch("/{user_id}/deactivate", response_model=schemas.UserOut)
def deactivate_user(
    user_id: int,
    db: Session = Depends(database.get_db),
    admin: models.User = Depends(auth.verify_admin_user)
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    user = _get_user_or_404(db, user_id)
    user.is_active = False
    db.commit()
    db.refresh(user)
    return user

# Admin Only - Activate User
@router.patch("/{user_id}/activate", response_model=schemas.UserOut, dependencies=[Depends(auth.verify_admin_user)])
def activate_user(user_id: int, db: Session = Depends(database.get_db)):
    user = _get_user_or_404(db, user_id)
    user.is_active = True
    db.commit()
    db.refresh(user)
    return user
