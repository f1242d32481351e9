import uvicorn

from shared.logging import configure_logging

from .config import ServiceConfig
from .main import create_app


def main() -> None:
    cfg = ServiceConfig.from_env()
    configure_logging(cfg.log_level)
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    main()
