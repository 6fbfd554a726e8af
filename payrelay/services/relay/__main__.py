"""Run the relay with uvicorn on the configured port."""

import uvicorn

from payrelay.common.config import settings


if __name__ == "__main__":
    uvicorn.run("payrelay.services.relay.main:app", host="0.0.0.0", port=settings.port, log_config=None)
