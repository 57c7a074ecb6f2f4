"""
Dashboard Analytics API entry point.

    uvicorn dashboard_api.main:app
"""

import uvicorn

from dashboard_api.config import get_settings
from dashboard_api.serving.api import create_api_app

app = create_api_app()


@app.get("/api/info")
async def api_info():
    """API information endpoint."""
    settings = app.state.settings
    return {
        "name": settings.app_name,
        "version": settings.version,
        "environment": settings.app_env,
    }


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "dashboard_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
