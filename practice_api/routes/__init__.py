"""Resource routers mounted under the configured API prefix."""

from fastapi import FastAPI

from practice_api.routes import medication, patient, visit

RESOURCE_ROUTERS = (patient, visit, medication)


def register_routes(app: FastAPI, api_root: str) -> None:
    """Mount every resource router at ``{api_root}/{resource}``."""

    for module in RESOURCE_ROUTERS:
        app.include_router(module.router, prefix=f"{api_root}/{module.RESOURCE}")


__all__ = ["RESOURCE_ROUTERS", "register_routes"]
