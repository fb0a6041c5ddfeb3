#!/usr/bin/env python3
"""Run the market feed and log each published board."""

import asyncio
import logging

from dotenv import load_dotenv

from src.coinfeed.config import CoinfeedConfig
from src.coinfeed.enums import DataKind
from src.coinfeed.log import configure_logging
from src.coinfeed.model.board import MarketBoard
from src.coinfeed.service.market_feed import MarketFeed

logger = logging.getLogger("coinfeed.runner")


def log_board(board: MarketBoard) -> None:
    """Log a compact view of the board."""
    logger.info(board.snapshot.to_summary())
    if board.snapshot.global_summary is not None:
        logger.info(board.snapshot.global_summary.format_summary())
    for kind in DataKind:
        if message := board.error_for(kind) or board.warning_for(kind):
            logger.warning(message)
    for coin in board.coins[:10]:
        logger.info(coin.format_summary())


async def main() -> None:
    config = CoinfeedConfig.from_env()
    configure_logging(config.log_level, debug=config.debug)

    async with MarketFeed(config) as feed:
        feed.aggregator.subscribe(log_board)

        fear_greed = await feed.insights.fear_greed()
        if fear_greed is not None and fear_greed.current is not None:
            current = fear_greed.current
            logger.info(f"Fear & Greed: {current.value} ({current.classification})")

        await asyncio.Event().wait()


if __name__ == "__main__":
    load_dotenv()
    print("Starting Coinfeed...")
    print("Press Ctrl+C to quit")
    print("-" * 50)
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("Stopped.")
