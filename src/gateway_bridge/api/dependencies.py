# src/gateway_bridge/api/dependencies.py
from fastapi import Request
from typing import Annotated
from fastapi import Depends
from ..core.platform import BridgePlatform

async def get_platform(request: Request) -> BridgePlatform:
    return request.app.state.components.platform

# Type definitions for dependencies
PlatformDependency = Annotated[BridgePlatform, Depends(get_platform)]
