"""Flask and Socket.IO wiring for the Review Bomber server."""

from __future__ import annotations

import logging
import os
import random
import socket

import flask
import flask_socketio

from review_bomber.configurations import game_config
from review_bomber.server.presentation import (LoggingSink, MultiSink,
                                               PresentationSink)
from review_bomber.server.round_coordinator import RoundCoordinator
from review_bomber.server.round_logger import RoundRecapLogger
from review_bomber.server.transport import (Scheduler, SocketIOScheduler,
                                            SocketIOTransport)


def setup_logger(name, log_file, level=logging.INFO):
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler = logging.FileHandler(log_file)
    handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.addHandler(handler)
    logger.addHandler(console_handler)
    logger.propagate = False

    return logger


logger = setup_logger(__name__, "./rblog.log", level=logging.DEBUG)

CONFIG = game_config.GameConfig()

# The single owner of all round state. Built in configure()/run().
COORDINATOR: RoundCoordinator | None = None


#######################
# Flask Configuration #
#######################

app = flask.Flask(__name__)
app.config["SECRET_KEY"] = os.getenv("REVIEW_BOMBER_SECRET_KEY", "secret!")

app.config["DEBUG"] = os.getenv("FLASK_ENV", "production") == "development"

socketio = flask_socketio.SocketIO(
    app,
    cors_allowed_origins="*",
    logger=app.config["DEBUG"],
)


@app.route("/")
def index():
    """Serve the phone client so players can join from the onboarding link."""
    if CONFIG.client_page is None:
        return "No client page configured.", 404
    return flask.send_file(os.path.abspath(CONFIG.client_page))


@app.route("/health")
def health():
    if COORDINATOR is None:
        return flask.jsonify({"status": "not_started"}), 503
    return flask.jsonify({"status": "ok", **COORDINATOR.status()})


@socketio.on("connect")
def on_connect(auth=None):
    if COORDINATOR is None:
        logger.error("Connection received before the server was configured")
        return
    COORDINATOR.on_connect(flask.request.sid)


@socketio.on("disconnect")
def on_disconnect(reason=None):
    if COORDINATOR is None:
        return
    logger.info(f"Connection {flask.request.sid} closed ({reason})")
    COORDINATOR.on_disconnect(flask.request.sid)


@socketio.on("message")
def on_message(data):
    if COORDINATOR is None:
        logger.error("Message received before the server was configured")
        return
    COORDINATOR.on_message(flask.request.sid, data)


def configure(
    config: game_config.GameConfig,
    scheduler: Scheduler | None = None,
    sink: PresentationSink | None = None,
    rng: random.Random | None = None,
) -> RoundCoordinator:
    """Build the coordinator for ``config`` and attach it to the socket handlers."""
    global CONFIG, COORDINATOR
    CONFIG = config

    sinks = [LoggingSink()]
    if config.save_round_data:
        sinks.append(RoundRecapLogger(data_dir=config.data_dir, game_id=config.game_id))
    if sink is not None:
        sinks.append(sink)

    COORDINATOR = RoundCoordinator(
        config,
        transport=SocketIOTransport(socketio),
        scheduler=scheduler or SocketIOScheduler(socketio),
        sink=MultiSink(sinks),
        rng=rng,
    )
    logger.info(
        f"Configured {config.game_id}: {len(config.theme_prompts)} theme prompts, "
        f"theme phase {config.theme_duration_seconds}s"
    )
    return COORDINATOR


def run(config: game_config.GameConfig, sink: PresentationSink | None = None):
    configure(config, sink=sink)

    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        local_ip = s.getsockname()[0]
        s.close()
    except Exception:
        local_ip = "unavailable"

    print("\n" + "=" * 70)
    print(f"{config.title} ({config.game_id})")
    print("=" * 70)
    print("\nServer starting on:")
    print(f"  Local:   http://localhost:{config.port}")
    print(f"  Network: http://{local_ip}:{config.port}")
    print("=" * 70 + "\n")

    socketio.run(
        app,
        log_output=app.config["DEBUG"],
        port=config.port,
        host=config.host,
    )
