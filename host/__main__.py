import argparse
import asyncio
import logging
import os

from kalitiri.models import RoomConfig
from .server import HostServer


def main() -> None:
    parser = argparse.ArgumentParser(description="KaliTiri room server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", 3000)))
    parser.add_argument("--min-players", type=int, default=4)
    parser.add_argument("--max-players", type=int, default=8)
    parser.add_argument("--seed", type=int, default=None, help="Seed the shuffle for reproducible deals")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = RoomConfig(
        min_players=args.min_players,
        max_players=args.max_players,
        seed=args.seed,
    )

    server = HostServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
