import pytest

from mission_control.services.map_reconstructor import MapReconstructor
from rover_protocol import (
    CommandResponseMessage,
    CommandResponsePayload,
    ErrorMessage,
    ErrorPayload,
    ObstacleDiscoveredMessage,
    ObstacleDiscoveredPayload,
    PongMessage,
    Position,
    StatusMessage,
    StatusPayload,
)


def status(x, y, direction="NORTH", rover_id="rover-1", battery=100.0):
    return StatusMessage(
        source=rover_id,
        payload=StatusPayload(
            rover_id=rover_id,
            position=Position(x=x, y=y),
            direction=direction,
            battery=battery,
            state="ACTIVE" if battery > 0 else "INACTIVE",
        ),
    )


def obstacle(x, y):
    return ObstacleDiscoveredMessage(
        source="rover-1",
        payload=ObstacleDiscoveredPayload(position=Position(x=x, y=y), discovered_at=1700000000000),
    )


def response(path, success=True):
    final = path[-1] if path else Position(x=0, y=0)
    return CommandResponseMessage(
        source="rover-1",
        payload=CommandResponsePayload(
            success=success,
            message="done",
            final_position=final,
            final_direction="EAST",
            path_taken=path,
        ),
    )


def test_first_status_marks_only_current_cell():
    reconstructor = MapReconstructor(10, 10)

    reconstructor.apply(status(2, 2, "EAST"))

    assert reconstructor.model.explored == {Position(x=2, y=2)}
    known = reconstructor.model.last_known_rover_state
    assert known.rover_id == "rover-1"
    assert known.position == Position(x=2, y=2)
    assert known.direction == "EAST"


def test_status_traces_path_from_previous_position():
    reconstructor = MapReconstructor(10, 10)
    reconstructor.apply(status(2, 2))

    reconstructor.apply(status(2, 5))

    assert reconstructor.model.explored == {Position(x=2, y=y) for y in range(2, 6)}


def test_status_traces_wrapped_single_step():
    reconstructor = MapReconstructor(5, 5)
    reconstructor.apply(status(0, 0))

    reconstructor.apply(status(4, 0))

    assert reconstructor.model.explored == {Position(x=0, y=0), Position(x=4, y=0)}


def test_status_positions_are_normalised_to_map():
    reconstructor = MapReconstructor(5, 5)

    reconstructor.apply(status(7, 6))

    assert reconstructor.model.last_known_rover_state.position == Position(x=2, y=1)


def test_command_response_path_is_idempotent_with_status_tracing():
    reconstructor = MapReconstructor(10, 10)
    reconstructor.apply(status(1, 2))
    path = [Position(x=2, y=2), Position(x=3, y=2)]

    reconstructor.apply(response(path))
    reconstructor.apply(status(3, 2))
    reconstructor.apply(response(path))

    assert reconstructor.model.explored == {Position(x=1, y=2), Position(x=2, y=2), Position(x=3, y=2)}


def test_command_response_without_path_changes_nothing():
    reconstructor = MapReconstructor(10, 10)
    reconstructor.apply(status(1, 1))

    reconstructor.apply(response([]))

    assert reconstructor.model.explored == {Position(x=1, y=1)}


def test_status_after_command_response_keeps_exact_path():
    reconstructor = MapReconstructor(10, 10)
    reconstructor.apply(status(1, 1))
    path = [
        Position(x=1, y=2),
        Position(x=1, y=3),
        Position(x=2, y=3),
        Position(x=3, y=3),
        Position(x=3, y=2),
        Position(x=3, y=1),
    ]

    reconstructor.apply(response(path))
    reconstructor.apply(status(3, 1))

    assert reconstructor.model.explored == {Position(x=1, y=1), *path}
    assert Position(x=2, y=1) not in reconstructor.model.explored


def test_status_not_matching_last_path_is_still_traced():
    reconstructor = MapReconstructor(10, 10)
    reconstructor.apply(status(1, 1))
    reconstructor.apply(response([Position(x=1, y=2)]))

    reconstructor.apply(status(1, 4))

    assert reconstructor.model.explored == {Position(x=1, y=y) for y in range(1, 5)}


def test_obstacles_are_deduplicated():
    reconstructor = MapReconstructor(10, 10)

    assert reconstructor.apply_obstacle(obstacle(3, 3)) is True
    assert reconstructor.apply_obstacle(obstacle(3, 3)) is False
    reconstructor.apply(obstacle(4, 3))
    reconstructor.apply(obstacle(3, 3))

    assert reconstructor.model.obstacles == [Position(x=3, y=3), Position(x=4, y=3)]


def test_explored_never_shrinks_within_a_connection():
    reconstructor = MapReconstructor(6, 6)
    stream = [
        status(0, 0),
        response([Position(x=1, y=0), Position(x=2, y=0)]),
        status(2, 0),
        obstacle(3, 0),
        status(2, 0),
        response([Position(x=2, y=5)]),
        status(2, 5),
        status(5, 5),
        obstacle(3, 0),
    ]
    sizes = []

    for message in stream:
        reconstructor.apply(message)
        sizes.append(len(reconstructor.model.explored))

    assert sizes == sorted(sizes)
    assert sizes[-1] > sizes[0]


def test_reconnect_resets_map_exactly_once():
    reconstructor = MapReconstructor(10, 10)
    reconstructor.apply(status(1, 1))
    reconstructor.apply(status(1, 4))
    reconstructor.apply(obstacle(1, 5))

    reconstructor.forget_rover()
    reconstructor.mark_reset_pending()
    assert reconstructor.model.last_known_rover_state is None

    reconstructor.apply(status(7, 7, rover_id="rover-2"))

    assert reconstructor.reset_pending is False
    assert reconstructor.model.explored == {Position(x=7, y=7)}
    assert reconstructor.model.obstacles == []
    assert reconstructor.model.last_known_rover_state.rover_id == "rover-2"

    reconstructor.apply(status(7, 8, rover_id="rover-2"))
    reconstructor.apply(status(7, 9, rover_id="rover-2"))

    assert reconstructor.model.explored == {Position(x=7, y=7), Position(x=7, y=8), Position(x=7, y=9)}


def test_reset_pending_does_not_trigger_on_non_status_messages():
    reconstructor = MapReconstructor(10, 10)
    reconstructor.apply(status(1, 1))
    reconstructor.mark_reset_pending()

    reconstructor.apply(obstacle(2, 2))

    assert reconstructor.reset_pending is True
    assert Position(x=1, y=1) in reconstructor.model.explored


def test_pong_refreshes_last_contact():
    reconstructor = MapReconstructor(10, 10)
    reconstructor.apply(status(1, 1))
    reconstructor.model.last_known_rover_state.last_contact = 0

    reconstructor.apply(PongMessage(source="rover-1"))

    assert reconstructor.model.last_known_rover_state.last_contact > 0


def test_error_message_leaves_model_untouched(caplog):
    reconstructor = MapReconstructor(10, 10)

    with caplog.at_level("WARNING"):
        reconstructor.apply(ErrorMessage(source="rover-1", payload=ErrorPayload(error="bad input")))

    assert reconstructor.model.explored == set()
    assert "bad input" in caplog.text


def test_summary_reports_exploration():
    reconstructor = MapReconstructor(4, 5)
    reconstructor.apply(status(0, 0))
    reconstructor.apply(status(0, 4))
    reconstructor.apply(obstacle(1, 1))

    summary = reconstructor.summary(connected=True)

    assert summary.connected is True
    assert summary.total_area == 20
    assert summary.explored_area == 2
    assert summary.exploration_percentage == 10
    assert summary.obstacles_found == 1
    assert summary.rover.position == Position(x=0, y=4)


def test_rejects_empty_map():
    with pytest.raises(ValueError):
        MapReconstructor(0, 5)
