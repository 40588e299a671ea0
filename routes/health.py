from fastapi import APIRouter

from schemas.job_contract import CONTRACT_VERSION
from schemas.responses import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
def health():
    return HealthResponse(status="OK", contract_version=CONTRACT_VERSION)
