from __future__ import annotations

import atexit
import logging
import socket

import flask
import flask_socketio

from peerqueue.configurations import server_config
from peerqueue.server import thread_safe_collections
from peerqueue.server.matchmaking_queue import (InvalidParticipantId,
                                                MatchmakingQueue,
                                                validate_participant_id)
from peerqueue.utils.typing import ParticipantID, SessionID


def setup_logger(name, log_file, level=logging.INFO):
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    logger = logging.getLogger(name)
    logger.setLevel(level)
    # Repeated server initialization must not stack handlers
    if logger.handlers:
        return logger

    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    logger.propagate = False

    return logger


logger = logging.getLogger(__name__)

CONFIG = server_config.ServerConfig()

# The single owner of the waiting room and match ledger. Instantiated in init_server().
QUEUE: MatchmakingQueue | None = None

# Socket session ID to participant ID map, filled by the "register" event
SESSION_ID_TO_PARTICIPANT_ID: dict[SessionID, ParticipantID] = (
    thread_safe_collections.ThreadSafeDict()
)


#######################
# Flask Configuration #
#######################

app = flask.Flask(__name__)
app.config["SECRET_KEY"] = "secret!"

# Bound to the app in init_server() so the allowed origins come from the config
socketio = flask_socketio.SocketIO()


@app.after_request
def add_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = CONFIG.cors_allowed_origins
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response


def _request_participant_id() -> ParticipantID:
    data = flask.request.get_json(silent=True) or {}
    return validate_participant_id(data.get("id"))


def _invalid_id_response(route: str, error: InvalidParticipantId):
    logger.warning(f"[Queue] Rejected {route} request: {error}")
    return flask.jsonify({"error": str(error)}), 400


##################
# Request routes #
##################


@app.route("/queue/join", methods=["POST"])
def join_queue():
    data = flask.request.get_json(silent=True) or {}
    try:
        result = QUEUE.join(data.get("id"), data.get("name"))
    except InvalidParticipantId as e:
        return _invalid_id_response("join", e)
    return flask.jsonify(result.to_dict())


@app.route("/queue/match/<participant_id>", methods=["GET"])
def poll_match(participant_id):
    return flask.jsonify(QUEUE.poll(participant_id).to_dict())


@app.route("/queue/confirm", methods=["POST"])
def confirm_match():
    try:
        participant_id = _request_participant_id()
    except InvalidParticipantId as e:
        return _invalid_id_response("confirm", e)
    QUEUE.confirm(participant_id)
    return flask.jsonify({"success": True})


@app.route("/queue/leave", methods=["POST"])
def leave_queue():
    try:
        participant_id = _request_participant_id()
    except InvalidParticipantId as e:
        return _invalid_id_response("leave", e)
    QUEUE.leave(participant_id)
    return flask.jsonify({"success": True})


@app.route("/health", methods=["GET"])
def health():
    return flask.jsonify(QUEUE.health())


@app.route("/debug/queue", methods=["GET"])
def debug_queue():
    return flask.jsonify(QUEUE.debug_dump())


############################
# Socket.IO lifecycle hooks #
############################


@socketio.on("register")
def register_participant(data):
    """
    Ties a participant ID to the socket session so a later transport
    disconnect can be mapped back to the participant.
    """
    participant_id = (data or {}).get("id")
    sid = flask.request.sid

    if not isinstance(participant_id, str) or not participant_id:
        logger.warning(f"[Peer] Socket {sid} tried to register without an id")
        flask_socketio.emit("error", {"error": "id required"})
        return

    SESSION_ID_TO_PARTICIPANT_ID[sid] = participant_id
    QUEUE.on_connect(participant_id)
    flask_socketio.emit("registered", {"id": participant_id})


@socketio.on("disconnect")
def on_disconnect(reason=None):
    """
    Remove a disconnected participant from the waiting room.

    A participant reconnecting from a second socket before the first one
    times out is still connected, so only the last socket's disconnect
    counts.
    """
    sid = flask.request.sid
    participant_id, remaining = SESSION_ID_TO_PARTICIPANT_ID.pop_and_count_value(sid)

    if participant_id is None:
        logger.info(f"No participant registered for disconnecting socket {sid}")
        return

    if remaining:
        logger.info(
            f"[Peer] {participant_id} closed socket {sid} but is still connected "
            f"on {remaining} other socket(s)"
        )
        return

    QUEUE.on_disconnect(participant_id)


def init_server(config: server_config.ServerConfig) -> MatchmakingQueue:
    """Build the matchmaking queue and bind Socket.IO to the app.

    Safe to call more than once; the previous queue is shut down first.
    """
    global CONFIG, QUEUE
    CONFIG = config

    setup_logger("peerqueue", config.log_file, level=config.log_level)

    if QUEUE is not None:
        QUEUE.shutdown()
    QUEUE = MatchmakingQueue.from_config(config)
    SESSION_ID_TO_PARTICIPANT_ID.clear()
    logger.info(
        f"Initialized matchmaking queue (queue timeout {config.queue_timeout_s}s, "
        f"match timeout {config.match_timeout_s}s, "
        f"disconnect policy {config.disconnect_policy}, "
        f"confirm policy {config.confirm_policy})"
    )

    if socketio.server is None:
        socketio.init_app(
            app,
            cors_allowed_origins=config.cors_allowed_origins,
            logger=app.config["DEBUG"],
        )

    return QUEUE


def on_exit():
    if QUEUE is not None:
        QUEUE.shutdown()


def run(config: server_config.ServerConfig):
    init_server(config)
    QUEUE.start()
    atexit.register(on_exit)

    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        local_ip = s.getsockname()[0]
        s.close()
    except OSError:
        local_ip = "unavailable"

    print("\n" + "=" * 70)
    print("Matchmaking server starting on:")
    print(f"  Local:   http://localhost:{config.port}")
    print(f"  Network: http://{local_ip}:{config.port}")
    print("  Matchmaking: POST /queue/join, GET /queue/match/<id>")
    print("=" * 70 + "\n")

    socketio.run(
        app,
        log_output=app.config["DEBUG"],
        port=config.port,
        host=config.host,
    )
