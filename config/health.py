from __future__ import annotations

from typing import Any

from django.db import connection
from django.http import JsonResponse

from retainer.realtime.hub import get_hub
from retainer.realtime.hub import is_initialized


def check_db() -> dict[str, Any]:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    else:
        return {"ok": True}


def check_realtime() -> dict[str, Any]:
    if not is_initialized():
        return {"ok": False, "error": "realtime hub not initialized"}
    hub = get_hub()
    return {
        "ok": True,
        "connections": len(hub.connections),
        "rooms": len(hub.rooms),
    }


def health(request):
    db = check_db()
    realtime = check_realtime()
    components = {"db": db, "realtime": realtime}

    all_ok = all(v.get("ok", False) for v in components.values())
    some_ok = any(v.get("ok", False) for v in components.values())

    status = "ok" if all_ok else ("degraded" if some_ok else "down")
    http_status = 200 if all_ok else 503

    return JsonResponse(
        {"status": status, "components": components},
        status=http_status,
    )
