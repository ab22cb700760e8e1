from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from ..core.accessory import Accessory, Characteristic, Service


class CharacteristicState(BaseModel):
    type: str
    value: Any = None
    writable: bool = False
    props: Dict[str, Any] = {}

    @classmethod
    def from_characteristic(cls, characteristic: Characteristic) -> "CharacteristicState":
        return cls(
            type=characteristic.ctype.value,
            value=characteristic.handle_get(),
            writable=characteristic.writable,
            props=characteristic.props,
        )


class ServiceState(BaseModel):
    type: str
    name: str
    characteristics: List[CharacteristicState] = []

    @classmethod
    def from_service(cls, service: Service) -> "ServiceState":
        return cls(
            type=service.stype.value,
            name=service.name,
            characteristics=[
                CharacteristicState.from_characteristic(characteristic)
                for characteristic in service.characteristics.values()
            ],
        )


class AccessorySummary(BaseModel):
    uuid: str
    display_name: str
    reachable: bool
    registered: bool
    services: List[str] = []


class AccessoryState(AccessorySummary):
    service_states: List[ServiceState] = []

    @classmethod
    def from_accessory(cls, accessory: Accessory, registered: bool) -> "AccessoryState":
        return cls(
            uuid=accessory.uuid,
            display_name=accessory.display_name,
            reachable=accessory.reachable,
            registered=registered,
            services=[service.stype.value for service in accessory.services],
            service_states=[ServiceState.from_service(service) for service in accessory.services],
        )


class CharacteristicWrite(BaseModel):
    value: Any


class GatewayStatus(BaseModel):
    name: str
    state: str
    reachable: Optional[bool] = None
    attempts: int = 0
    error: Optional[str] = None
    device_id: Optional[str] = None
    child_count: int = 0
