"""Application/UI layer package."""

from .facade import ApplicationFacade

__all__ = ["ApplicationFacade"]
