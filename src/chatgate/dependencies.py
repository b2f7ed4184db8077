from collections.abc import Callable

from fastapi import HTTPException, Request, status

from .component_registry import ComponentRegistry


def get_registry(request: Request) -> ComponentRegistry:
    registry = getattr(request.app.state, "registry", None)
    if not registry:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Component registry not initialized",
        )
    return registry


def get_component(name: str) -> Callable[[Request], object]:
    """FastAPI dependency resolving a registered component by name or alias."""

    def _get_component(request: Request) -> object:
        component = get_registry(request).get(str(getattr(name, "value", name)))
        if component is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Component '{name}' not available on this node",
            )
        return component

    return _get_component
