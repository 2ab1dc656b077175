"""
本地启动：python -m storefront
"""

import uvicorn

from .config.settings import settings

if __name__ == "__main__":
    uvicorn.run("storefront.app:app", host="127.0.0.1", port=8000, reload=settings.debug)
