import uvicorn

from coaching_api.api.app import create_app
from coaching_api.shared.config.settings import settings

app = create_app()


if __name__ == "__main__":
    uvicorn.run("coaching_api.main:app", host=settings.api_host, port=settings.api_port)
