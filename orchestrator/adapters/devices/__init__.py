from orchestrator.adapters.devices.registry import DeviceRegistry

__all__ = ["DeviceRegistry"]
