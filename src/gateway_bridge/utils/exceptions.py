# src/gateway_bridge/utils/exceptions.py

class BridgeError(Exception):
    """Base exception class for the gateway bridge"""
    pass

class ConfigurationError(BridgeError):
    """Raised when there are issues with configuration"""
    pass

class InitializationError(BridgeError):
    """Raised when component initialization fails"""
    pass

class DiscoveryError(BridgeError):
    """Raised when a gateway could not be resolved"""
    pass

class DeviceError(BridgeError):
    """Raised when there are issues with device operations"""
    pass

class ReadOnlyCharacteristicError(BridgeError):
    """Raised when a host write targets a characteristic without a set handler"""
    pass
