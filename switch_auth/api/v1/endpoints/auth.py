import logging
import traceback
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, status

from switch_auth.api.v1.deps import ensure_owner, get_current_claims, get_user_service
from switch_auth.core.exceptions import IdentityException
from switch_auth.schemas.auth_schema import ApiResponse, TokenClaims
from switch_auth.schemas.user_schema import to_document
from switch_auth.services.user_service import UserService

router = APIRouter(tags=["auth"], prefix="/api/auth")


def _unexpected(operation: str, e: Exception) -> HTTPException:
    logging.error(f"Internal Server Error in {operation}: {e}\n{traceback.format_exc()}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                         detail="An unknown error occurred.")


@router.post("/register/passenger", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def register_passenger(payload: Dict[str, Any] = Body(...),
                             user_svc: UserService = Depends(get_user_service)):
    try:
        passenger = await user_svc.register_passenger(payload)
    except IdentityException:
        raise
    except Exception as e:
        raise _unexpected("register_passenger", e)
    return ApiResponse(message="Passenger registered successfully", data=to_document(passenger))


@router.post("/register/driver", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def register_driver(payload: Dict[str, Any] = Body(...),
                          user_svc: UserService = Depends(get_user_service)):
    try:
        driver = await user_svc.register_driver(payload)
    except IdentityException:
        raise
    except Exception as e:
        raise _unexpected("register_driver", e)
    return ApiResponse(message="Driver registered successfully", data=to_document(driver))


@router.post("/login", response_model=ApiResponse)
async def login(payload: Dict[str, Any] = Body(...),
                user_svc: UserService = Depends(get_user_service)):
    try:
        result = await user_svc.login(payload)
    except IdentityException:
        raise
    except Exception as e:
        raise _unexpected("login", e)
    return ApiResponse(
        message="Login successful",
        data={"user": to_document(result.user), "token": result.token},
    )


@router.get("/profile", response_model=ApiResponse)
async def read_profile(claims: TokenClaims = Depends(get_current_claims),
                       user_svc: UserService = Depends(get_user_service)):
    user = await user_svc.get_profile(claims.id)
    return ApiResponse(data=to_document(user))


@router.put("/profile/passenger/{user_id}", response_model=ApiResponse)
async def update_passenger_profile(user_id: str,
                                   payload: Dict[str, Any] = Body(...),
                                   claims: TokenClaims = Depends(get_current_claims),
                                   user_svc: UserService = Depends(get_user_service)):
    ensure_owner(claims, user_id)
    passenger = await user_svc.update_passenger(user_id, payload)
    return ApiResponse(message="Passenger profile updated successfully", data=to_document(passenger))


@router.put("/profile/driver/{user_id}", response_model=ApiResponse)
async def update_driver_profile(user_id: str,
                                payload: Dict[str, Any] = Body(...),
                                claims: TokenClaims = Depends(get_current_claims),
                                user_svc: UserService = Depends(get_user_service)):
    ensure_owner(claims, user_id)
    driver = await user_svc.update_driver(user_id, payload)
    return ApiResponse(message="Driver profile updated successfully", data=to_document(driver))


@router.post("/logout", response_model=ApiResponse)
async def logout():
    # tokens are stateless, the client just drops its copy
    return ApiResponse(message="Logout successful")
