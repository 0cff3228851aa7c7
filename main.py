import uvicorn

from mistock.core.config import settings
from mistock.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
