from typing import Any, Dict, List

import tornado.web
from pydantic import BaseModel, Field

from rover_protocol import MESSAGE_MODELS


class ProtocolDocument(BaseModel):
    """Documentation payload served at /docs for quick reference."""

    websocket_endpoints: Dict[str, str]
    http_endpoints: Dict[str, str]
    inbound_messages: Dict[str, Dict[str, Any]]
    outbound_messages: Dict[str, Dict[str, Any]]
    examples: Dict[str, Any] = Field(default_factory=dict)
    notes: List[str] = []


INBOUND_TYPES = ("COMMAND", "PING")
OUTBOUND_TYPES = ("STATUS", "COMMAND_RESPONSE", "OBSTACLE_DISCOVERED", "PONG", "ERROR")


class DocsHandler(tornado.web.RequestHandler):
    def get(self):
        command_example = {
            "id": "msg-3f2a",
            "type": "COMMAND",
            "payload": {"commands": ["F", "F", "R", "F"]},
            "timestamp": 1700000000000,
            "source": "mission-control",
        }
        response_example = {
            "id": "msg-91bc",
            "type": "COMMAND_RESPONSE",
            "payload": {
                "success": False,
                "message": "Stopped after 2/4 commands: obstacle detected at (2, 0)",
                "finalPosition": {"x": 2, "y": 1},
                "finalDirection": "NORTH",
                "obstacleDetected": {"x": 2, "y": 0},
                "pathTaken": [{"x": 2, "y": 1}],
            },
            "timestamp": 1700000000012,
            "source": "curiosity-rover",
        }

        document = ProtocolDocument(
            websocket_endpoints={"mission_control": "/ws/control"},
            http_endpoints={"health": "/health", "docs": "/docs"},
            inbound_messages={name: MESSAGE_MODELS[name].model_json_schema() for name in INBOUND_TYPES},
            outbound_messages={name: MESSAGE_MODELS[name].model_json_schema() for name in OUTBOUND_TYPES},
            examples={"command": command_example, "command_response": response_example},
            notes=[
                "All WebSocket messages are JSON text frames using the shared envelope {id, type, payload, timestamp, source}.",
                "A STATUS message is sent to a connection as soon as it opens.",
                "After every COMMAND the rover broadcasts STATUS to all open connections.",
                "Malformed or unsupported messages are answered with ERROR; the connection stays open.",
                "The planet is a torus: moving past an edge re-enters from the opposite edge.",
                "Authentication, when enabled: 'Authorization: Bearer <token>' header or '?token=' query param.",
            ],
        )
        self.set_header("Content-Type", "application/json")
        self.write(document.model_dump(mode="json"))
