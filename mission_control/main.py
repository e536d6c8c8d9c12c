import logging
import os
import signal

import tornado.ioloop

from mission_control.config import MissionControlConfig
from mission_control.operator_console import OperatorConsole
from mission_control.services.connection_supervisor import ConnectionSupervisor
from mission_control.services.map_reconstructor import MapReconstructor


def setup_logger(name):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def main() -> None:
    logger = setup_logger("mission_control")
    logger.info(f"Started mission control process {os.getpid()}")
    config = MissionControlConfig.from_env()
    logger.info(f"Rover URL {config.rover_url}, map {config.map_width}x{config.map_height}")

    reconstructor = MapReconstructor(config.map_width, config.map_height)
    supervisor = ConnectionSupervisor(config, reconstructor)
    console = OperatorConsole(supervisor, reconstructor)
    supervisor.on_message = console.show_message

    loop = tornado.ioloop.IOLoop.current()

    def shutdown():
        supervisor.stop()
        loop.stop()

    async def run_console():
        await console.run()
        shutdown()

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.asyncio_loop.add_signal_handler(signum, shutdown)

    supervisor.start()
    loop.spawn_callback(run_console)
    loop.start()


if __name__ == "__main__":
    main()
