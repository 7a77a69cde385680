from fastapi import APIRouter

from unifind.security import CurrentPrincipal

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me")
def me(principal: CurrentPrincipal) -> dict:
    """The principal resolved from the bearer token."""
    return {"user": principal.model_dump(by_alias=True, mode="json")}
