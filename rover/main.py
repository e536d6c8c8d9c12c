import logging
import os
import signal
from typing import Optional

import tornado.ioloop
import tornado.web

from rover.config import VehicleConfig
from rover.handlers import ControlWebSocketHandler, DocsHandler, HealthHandler
from rover.services.jwt_service import JWTAuthService
from rover.services.navigation_engine import NavigationEngine
from rover.services.protocol_router import ConnectionRegistry, ProtocolRouter


def make_app(config: Optional[VehicleConfig] = None) -> tornado.web.Application:
    config = config or VehicleConfig.from_env()
    engine = NavigationEngine(
        planet=config.planet,
        position=config.initial_position,
        direction=config.initial_direction,
        battery=config.initial_battery,
    )
    router = ProtocolRouter(engine, rover_id=config.rover_id, registry=ConnectionRegistry())
    jwt_service = JWTAuthService()

    return tornado.web.Application(
        [
            (r"/health", HealthHandler, dict(router=router)),
            (r"/docs", DocsHandler),
            (
                r"/ws/control",
                ControlWebSocketHandler,
                dict(router=router, jwt_service=jwt_service),
            ),
        ],
        router=router,
    )


def setup_logger(name):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def main() -> None:
    logger = setup_logger("rover")
    logger.info(f"Started rover process {os.getpid()}")
    config = VehicleConfig.from_env()
    logger.info(
        f"Rover '{config.rover_id}' at {config.initial_position} facing {config.initial_direction}, "
        f"planet {config.planet.width}x{config.planet.height} with {len(config.planet.obstacles)} obstacles"
    )
    app = make_app(config)
    server = app.listen(port=config.port, address=config.address)
    loop = tornado.ioloop.IOLoop.current()

    def shutdown():
        logger.info("Shutting down rover")
        server.stop()
        app.settings["router"].shutdown()
        loop.stop()

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.asyncio_loop.add_signal_handler(signum, shutdown)

    logger.info(f"Rover listening on ws://{config.address}:{config.port}/ws/control (Press Ctrl+C to quit)")
    loop.start()


if __name__ == "__main__":
    main()
