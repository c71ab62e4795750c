"""In-memory device registry: implements DevicePort."""

import sys
from datetime import datetime, timezone
from typing import Dict, List, Optional

from orchestrator.domain.models import DEVICE_OFFLINE, DEVICE_ONLINE, Device


def _log(msg: str):
    print(msg, file=sys.stderr)


class DeviceRegistry:
    """Devices keyed by id. Heartbeats mark a device online."""

    def __init__(self, devices: Optional[List[Device]] = None):
        self._devices: Dict[str, Device] = {}
        for device in devices or []:
            self._devices[device.id] = device

    def get(self, device_id: str) -> Optional[Device]:
        return self._devices.get(device_id)

    def list(self) -> List[Device]:
        return list(self._devices.values())

    def register(self, device_id: str, address: str, hostname: str = "") -> Device:
        """Create or refresh a device; registration counts as a heartbeat."""
        now = datetime.now(timezone.utc).isoformat()
        device = self._devices.get(device_id)
        if device is None:
            device = Device(id=device_id, address=address, hostname=hostname)
            self._devices[device_id] = device
            _log(f"[DeviceRegistry] registered {device_id} at {address}")
        else:
            device.address = address
            if hostname:
                device.hostname = hostname
        device.online_status = DEVICE_ONLINE
        device.last_seen = now
        return device

    def heartbeat(self, device_id: str) -> bool:
        """Mark a known device online. Returns False if the id is unknown."""
        device = self._devices.get(device_id)
        if device is None:
            return False
        device.online_status = DEVICE_ONLINE
        device.last_seen = datetime.now(timezone.utc).isoformat()
        return True

    def mark_offline(self, device_id: str) -> bool:
        device = self._devices.get(device_id)
        if device is None:
            return False
        if device.online_status != DEVICE_OFFLINE:
            _log(f"[DeviceRegistry] {device_id} went offline")
        device.online_status = DEVICE_OFFLINE
        return True
