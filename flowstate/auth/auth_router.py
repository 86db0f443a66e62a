# flowstate/auth/auth_router.py

# Placeholder: the service has no users yet. These routes only announce the
# planned surface so the client can probe it.

from fastapi import APIRouter
from fastapi.responses import JSONResponse

router = APIRouter(tags=["auth"])

PLANNED_ENDPOINTS = [
    "POST /login",
    "POST /register",
    "POST /logout",
    "GET /profile",
    "GET /status",
]


def _not_implemented(feature: str) -> JSONResponse:
    return JSONResponse(status_code=501, content={"message": f"{feature} functionality coming soon!"})


@router.get("/status")
def auth_status():
    return {"message": "Auth routes ready for implementation", "endpoints": PLANNED_ENDPOINTS}


@router.post("/login")
def login():
    return _not_implemented("Login")


@router.post("/register")
def register():
    return _not_implemented("Registration")


@router.post("/logout")
def logout():
    return _not_implemented("Logout")
