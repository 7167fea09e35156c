from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from task_summarizer.schemas.identity import IdentityResponse, MeResponse
from task_summarizer.utils.auth import CurrentIdentityOptional

router = APIRouter(tags=["Users"])


@router.get("/me", response_model=MeResponse)
async def get_me(identity: CurrentIdentityOptional):
    if identity is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"loggedIn": False},
        )
    return MeResponse(logged_in=True, user=IdentityResponse.model_validate(identity))
