from fastapi import APIRouter, Depends, HTTPException, status
from typing import Optional

from pulsehustle.api.deps import get_access_token, respond
from pulsehustle.platform import Platform, get_platform
from pulsehustle.schemas import LoginRequest, SessionResponse, SignUpRequest, UserResponse

router = APIRouter()


def require_token(token: Optional[str]) -> str:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return token


@router.post("/signup")
async def sign_up(request: SignUpRequest, platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.auth.sign_up,
        request.email,
        request.password,
        request.metadata,
        label="Sign up",
        context={"email": request.email},
        message="Signed up successfully",
    )
    return respond(result, SessionResponse, status_code=201)


@router.post("/login")
async def login(request: LoginRequest, platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.auth.sign_in_with_password,
        request.email,
        request.password,
        label="Sign in",
        context={"email": request.email},
        message="Logged in successfully",
    )
    return respond(result, SessionResponse)


@router.post("/logout")
async def logout(token: Optional[str] = Depends(get_access_token), platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.auth.sign_out, require_token(token), label="Sign out", message="Logged out successfully"
    )
    return respond(result)


@router.get("/user")
async def get_user(token: Optional[str] = Depends(get_access_token), platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(platform.auth.get_user, require_token(token), label="Get user")
    return respond(result, UserResponse)
