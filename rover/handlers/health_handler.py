import tornado.web

from rover.services.protocol_router import ProtocolRouter


class HealthHandler(tornado.web.RequestHandler):
    def initialize(self, router: ProtocolRouter):
        self.router = router

    def get(self):
        self.write(
            {
                "status": "ok",
                "roverId": self.router.rover_id,
                "connections": len(self.router.registry),
            }
        )
