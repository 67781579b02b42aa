from .videos import router as videos_router

routes = [
    videos_router,
]
