from fastapi import APIRouter, HTTPException
from typing import List
from ...core.accessory import Accessory, Characteristic, CharacteristicType
from ...core.platform import BridgePlatform
from ...models.accessory import (
    AccessoryState,
    AccessorySummary,
    CharacteristicState,
    CharacteristicWrite,
)
from ...utils.exceptions import ReadOnlyCharacteristicError
from ...utils.logging import get_logger
from ..dependencies import PlatformDependency

logger = get_logger(__name__)

accessory_router = APIRouter()


'''
# Host read
response = await client.get(f"/api/v1/accessories/{uuid}")

# Host write, e.g. turn a plug on
response = await client.put(f"/api/v1/accessories/{uuid}/characteristics/Plug/on", json={"value": True})
'''

def _get_accessory(platform: BridgePlatform, accessory_uuid: str) -> Accessory:
    accessory = platform.get_accessory(accessory_uuid)
    if accessory is None:
        raise HTTPException(status_code=404, detail=f"Accessory {accessory_uuid} not found")
    return accessory


def _get_characteristic(accessory: Accessory, service_name: str, characteristic_type: str) -> Characteristic:
    service = next((s for s in accessory.services if s.name == service_name), None)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Service {service_name} not found")
    try:
        ctype = CharacteristicType(characteristic_type)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown characteristic {characteristic_type}")
    if ctype not in service.characteristics:
        raise HTTPException(status_code=404, detail=f"Characteristic {characteristic_type} not found")
    return service.characteristics[ctype]


@accessory_router.get("/accessories", response_model=List[AccessorySummary])
async def list_accessories(platform: PlatformDependency) -> List[AccessorySummary]:
    return [
        AccessorySummary(
            uuid=accessory.uuid,
            display_name=accessory.display_name,
            reachable=accessory.reachable,
            registered=accessory.uuid in platform.registered,
            services=[service.stype.value for service in accessory.services],
        )
        for accessory in platform.accessories.values()
    ]


@accessory_router.get("/accessories/{accessory_uuid}", response_model=AccessoryState)
async def get_accessory(accessory_uuid: str, platform: PlatformDependency) -> AccessoryState:
    accessory = _get_accessory(platform, accessory_uuid)
    return AccessoryState.from_accessory(accessory, accessory.uuid in platform.registered)


@accessory_router.put(
    "/accessories/{accessory_uuid}/characteristics/{service_name}/{characteristic_type}",
    response_model=CharacteristicState
)
async def set_characteristic(accessory_uuid: str, service_name: str, characteristic_type: str,
                             write: CharacteristicWrite, platform: PlatformDependency) -> CharacteristicState:
    accessory = _get_accessory(platform, accessory_uuid)
    characteristic = _get_characteristic(accessory, service_name, characteristic_type)
    try:
        await characteristic.handle_set(write.value)
    except ReadOnlyCharacteristicError as e:
        raise HTTPException(status_code=405, detail=str(e))
    except Exception as e:
        logger.error(f"Error setting {characteristic_type} on {accessory.display_name}: {e}")
        raise HTTPException(
            status_code=502,
            detail=f"Failed to control device: {str(e)}"
        )
    return CharacteristicState.from_characteristic(characteristic)
