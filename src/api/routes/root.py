"""Root status endpoint."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

from core.utils import iso_timestamp

router = APIRouter()

API_VERSION = "1.0.0"
WELCOME_MESSAGE = "🟢 API del Salón Sandra Fajardo funcionando correctamente"

# Documented entry points, as published to frontend clients
DOCUMENTED_ENDPOINTS: Dict[str, str] = {
    "productos": "/api/productos",
    "carrito": "/api/carrito",
    "categorias": "/api/categorias",
    "usuarios": "/api/usuarios",
    "verificacion": "/api/verificacion",
    "auth": "/api/auth",
    "admin": "/api/admin",
    "citas": "/api/citas",
    "stock": "/api/stock",
}


@router.get("/")
async def api_status() -> Dict[str, Any]:
    """Welcome message, version, server time and the documented endpoints."""
    return {
        "mensaje": WELCOME_MESSAGE,
        "version": API_VERSION,
        "timestamp": iso_timestamp(),
        "endpoints": dict(DOCUMENTED_ENDPOINTS),
    }
