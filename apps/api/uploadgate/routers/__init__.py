from uploadgate.routers.uploads import router as uploads_router

__all__ = ["uploads_router"]
