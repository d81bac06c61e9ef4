import logging

import uvicorn
from menu.api.api_run import app
from menu.utilities import config
from menu.utilities.network import local_urls


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    urls = local_urls(config.APP_PORT)
    # First URL is loopback; a second one means other devices on the LAN can connect
    print(f"Weekly Menu API running on {urls[0]} (Press CTRL+C to quit)")
    for url in urls[1:]:
        print(f"Accessible from other devices at: {url}")
    uvicorn.run(app, host=config.APP_HOST, port=config.APP_PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
