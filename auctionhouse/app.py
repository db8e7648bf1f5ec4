"""Web application wiring and the service entry point."""

from __future__ import annotations

import argparse
import os
from typing import Any

from flask import Flask, jsonify, request
from pymongo.errors import PyMongoError
from dotenv import load_dotenv

from auctionhouse import applog
from auctionhouse.auction_repository import AuctionRepository
from auctionhouse.auction_usecase import AuctionUseCase
from auctionhouse.bid_repository import BidRepository
from auctionhouse.bid_usecase import BidUseCase
from auctionhouse.controllers import AuctionController, BidController, UserController
from auctionhouse.database import connect_from_env
from auctionhouse.errors import RestError
from auctionhouse.user_repository import UserRepository
from auctionhouse.user_usecase import UserUseCase

_EXTENSION = "auctionhouse"


def init_dependencies(
    database: Any,
) -> tuple[UserController, BidController, AuctionController]:
    """Build repositories, use cases and controllers over one database."""
    auction_repository = AuctionRepository(database)
    auction_repository.start()
    bid_repository = BidRepository(database, auction_repository)
    user_repository = UserRepository(database)

    user_controller = UserController(UserUseCase(user_repository))
    auction_controller = AuctionController(
        AuctionUseCase(auction_repository, bid_repository)
    )
    bid_controller = BidController(BidUseCase(bid_repository))
    return user_controller, bid_controller, auction_controller


def create_app(database: Any) -> Flask:
    """Create the Flask application serving the auction API."""
    app = Flask(__name__)
    user_controller, bid_controller, auction_controller = init_dependencies(database)
    app.extensions[_EXTENSION] = (user_controller, bid_controller, auction_controller)

    @app.errorhandler(RestError)
    def handle_rest_error(err: RestError):
        return jsonify(err.to_dict()), int(err.code)

    @app.get("/auction")
    def find_auctions():
        return jsonify(
            auction_controller.find_auctions(
                request.args.get("status", ""),
                request.args.get("category", ""),
                request.args.get("productName", ""),
            )
        )

    @app.get("/auction/<auction_id>")
    def find_auction_by_id(auction_id: str):
        return jsonify(auction_controller.find_auction_by_id(auction_id))

    @app.post("/auction")
    def create_auction():
        auction_controller.create_auction(request.get_data())
        return "", 201

    @app.get("/auction/winner/<auction_id>")
    def find_winning_bid_by_auction_id(auction_id: str):
        return jsonify(auction_controller.find_winning_bid_by_auction_id(auction_id))

    @app.post("/bid")
    def create_bid():
        bid_controller.create_bid(request.get_data())
        return "", 201

    @app.get("/bid/<auction_id>")
    def find_bid_by_auction_id(auction_id: str):
        return jsonify(bid_controller.find_bid_by_auction_id(auction_id))

    @app.get("/user/<user_id>")
    def find_user_by_id(user_id: str):
        return jsonify(user_controller.find_user_by_id(user_id))

    return app


def main(argv: list[str] | None = None) -> int:
    """Load the environment, connect to MongoDB and serve the API."""
    parser = argparse.ArgumentParser(description="Auction service HTTP API.")
    parser.add_argument("--env-file", default=os.path.join("cmd", "auction", ".env"))
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args(argv)

    if not os.path.isfile(args.env_file):
        applog.error("Error trying to load env variables", None)
        return 1
    load_dotenv(args.env_file)

    try:
        database = connect_from_env()
    except PyMongoError as err:
        applog.error(str(err), err)
        return 1

    app = create_app(database)
    app.run(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())