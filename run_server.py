import logging
import os

import uvicorn

from factiongraph.observability import configure_logging


logger = logging.getLogger(__name__)


if __name__ == "__main__":
    configure_logging(os.environ.get("FACTIONGRAPH_LOG_LEVEL", "INFO"))

    if not os.environ.get("FACTIONGRAPH_DATA_PATH"):
        logger.warning("FACTIONGRAPH_DATA_PATH not set, serving an empty dataset")

    logger.info("Starting faction graph API server...")
    logger.info("Docs available at: http://localhost:8000/docs")

    uvicorn.run(
        "factiongraph.api.server:app",
        host="0.0.0.0",
        port=int(os.environ.get("FACTIONGRAPH_PORT", "8000")),
        reload=False
    )
