import logging
import sys

from versemark.api import create_app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Versemark API on port 8000")
    uvicorn.run(app, host="0.0.0.0", port=8000)
