from .schedule import router as schedule_router

__all__ = ["schedule_router"]
