"""Medication collection persistence."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from .const import STORAGE_KEY, STORAGE_VERSION
from .models import Medication


class MedicationStore:
    """Full-snapshot store; each save replaces the whole collection."""

    def __init__(self, hass: HomeAssistant) -> None:
        self.hass = hass
        self._store: Store = Store(hass, STORAGE_VERSION, STORAGE_KEY)
        self._lock = asyncio.Lock()
        self._medications: List[Medication] = []
        self._last_id = 0

    async def async_load_all(self) -> List[Medication]:
        data = await self._store.async_load() or {}
        raw = data.get("medications", [])
        out: List[Medication] = []
        seen: set[int] = set()
        # Basic validation
        if isinstance(raw, list):
            for item in raw:
                if not isinstance(item, dict):
                    continue
                try:
                    med = Medication.from_dict(item)
                except (KeyError, TypeError, ValueError):
                    continue
                if med.id in seen:
                    continue
                seen.add(med.id)
                out.append(med)
        try:
            last_id = int(data.get("last_id", 0))
        except (TypeError, ValueError):
            last_id = 0
        # Never hand out an id that is already stored
        self._last_id = max([last_id, *seen]) if seen else last_id
        self._medications = out
        return list(out)

    async def async_save_all(self, medications: List[Medication]) -> None:
        async with self._lock:
            self._medications = list(medications)
            await self._async_save()

    async def async_mint_id(self) -> int:
        """Return a new id; the counter is persisted so ids are never reused."""
        async with self._lock:
            self._last_id += 1
            await self._async_save()
            return self._last_id

    async def _async_save(self) -> None:
        payload: Dict[str, Any] = {
            "last_id": self._last_id,
            "medications": [m.as_dict() for m in self._medications],
        }
        await self._store.async_save(payload)

    @property
    def last_id(self) -> int:
        return self._last_id
