# src/gateway_bridge/api/routes.py
from fastapi import APIRouter
from typing import List
from ..models.accessory import GatewayStatus
from .dependencies import PlatformDependency

gateway_router = APIRouter()

@gateway_router.get("/gateways", response_model=List[GatewayStatus])
async def get_gateways(platform: PlatformDependency) -> List[GatewayStatus]:
    statuses = []
    for supervisor in platform.supervisors:
        session = supervisor.session
        statuses.append(GatewayStatus(
            name=supervisor.config.label,
            state=supervisor.state.value,
            reachable=supervisor.reachable,
            attempts=supervisor.attempts,
            error=supervisor.error,
            device_id=session.device.device_id if session else None,
            child_count=len(session.child_accessories) if session else 0,
        ))
    return statuses
