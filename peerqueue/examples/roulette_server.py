from __future__ import annotations

import argparse

from peerqueue.configurations import configuration_constants, server_config


def build_config(argv=None) -> server_config.ServerConfig:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port number to listen on (defaults to $PORT, then 9000)",
    )
    parser.add_argument(
        "--drop-match-on-disconnect",
        action="store_true",
        help="Also discard a participant's pending match when its socket disconnects",
    )
    args = parser.parse_args(argv)

    disconnect_policy = (
        configuration_constants.DisconnectPolicies.DropMatch
        if args.drop_match_on_disconnect
        else configuration_constants.DisconnectPolicies.PreserveMatch
    )

    config = (
        server_config.ServerConfig()
        .hosting(host="0.0.0.0")
        .matchmaking(
            queue_timeout_s=120,
            match_timeout_s=300,
            sweep_interval_s=30,
            disconnect_policy=disconnect_policy,
        )
    )
    if args.port is not None:
        config.hosting(port=args.port)
    return config


if __name__ == "__main__":
    import eventlet

    eventlet.monkey_patch()

    from peerqueue.server import app

    app.run(build_config())
