# portal/api/routes/users.py
from typing import Optional

from fastapi import APIRouter, Depends

from portal.api.deps import Services, get_services
from portal.models.user import UserCreate

router = APIRouter()


@router.post("/users", status_code=201)
def create_user(payload: UserCreate, services: Services = Depends(get_services)):
    """Seed an admin or agency account. Signup and activation flows live elsewhere."""
    user = services.users.create_user(payload.name, payload.email, payload.role)
    return {"status": "success", "user": user.model_dump(mode="json")}


@router.get("/users")
def list_users(role: Optional[str] = None, services: Services = Depends(get_services)):
    users = services.users.list_users(role)
    return {
        "status": "success",
        "users": [u.model_dump(mode="json", include={"id", "name", "email", "role", "status"}) for u in users]
    }
