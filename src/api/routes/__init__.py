"""API route modules and the /api mount table."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from fastapi import APIRouter

from . import auth, root, upload
from .resources import build_report_router, build_resource_router

API_PREFIX = "/api"


@dataclass(frozen=True)
class RouterMount:
    """One entry of the mount table: ``/api/<prefix>`` handled by ``router``."""

    prefix: str
    router: APIRouter
    tag: str

    @property
    def path(self) -> str:
        return f"{API_PREFIX}/{self.prefix}"


def build_mount_table() -> List[RouterMount]:
    """
    The feature-area routers in their published order.

    Nested prefixes (``productos/reportes``) are listed after their parents
    here; `ordered_for_mounting` places them first when the app is built.
    """
    return [
        RouterMount("usuarios", build_resource_router("usuarios", protected=True), "Usuarios"),
        RouterMount("verificacion", build_resource_router("verificaciones", protected=True), "Verificación"),
        RouterMount("productos", build_resource_router("productos"), "Productos"),
        RouterMount("productos/reportes", build_report_router("productos"), "Reportes de productos"),
        RouterMount("inventario", build_resource_router("inventario", protected=True), "Inventario"),
        RouterMount("categorias", build_resource_router("categorias"), "Categorías"),
        RouterMount("carrito", build_resource_router("carrito", protected=True), "Carrito"),
        RouterMount("servicios", build_resource_router("servicios"), "Servicios"),
        RouterMount("servicios/reportes", build_report_router("servicios"), "Reportes de servicios"),
        RouterMount("upload", upload.router, "Upload"),
        RouterMount("logs", build_resource_router("logs", protected=True), "Logs"),
        RouterMount("citas", build_resource_router("citas", protected=True), "Citas"),
        RouterMount("ventas", build_resource_router("ventas", protected=True), "Ventas"),
        RouterMount("clientes", build_resource_router("clientes", protected=True), "Clientes"),
    ]


def _is_nested_under(child: str, parent: str) -> bool:
    return child.startswith(parent.rstrip("/") + "/")


def ordered_for_mounting(mounts: Sequence[RouterMount]) -> List[RouterMount]:
    """
    Keep the table order, except that a nested prefix moves in front of the
    first parent prefix registered before it, so first-match routing never
    shadows it.
    """
    ordered: List[RouterMount] = []
    for mount in mounts:
        position = next(
            (i for i, placed in enumerate(ordered) if _is_nested_under(mount.prefix, placed.prefix)),
            len(ordered),
        )
        ordered.insert(position, mount)
    return ordered


__all__ = [
    "API_PREFIX",
    "RouterMount",
    "build_mount_table",
    "ordered_for_mounting",
    "auth",
    "root",
    "upload",
]
