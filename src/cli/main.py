import argparse
import logging
import random
import sys

from src.cli.session import TradingSession
from src.config import EngineConfig
from src.core.errors import ValidationError
from src.executor.order_executor import OrderExecutor
from src.logging_config import setup_logging
from src.market.catalog import DEFAULT_CATALOG, load_catalog
from src.market.price_source import PriceSource
from src.persistence.json_store import JsonLedgerStore

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulated stock trading ledger")
    parser.add_argument("--data-dir", default=None, help="Directory of the JSON store")
    parser.add_argument("--seed", type=int, default=None, help="Seed of the price random walk")
    parser.add_argument("--catalog", default=None, help="YAML file with symbol/name/price entries")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    return parser.parse_args(argv)


def build_session(config: EngineConfig, catalog_path=None, stdin=None, stdout=None) -> TradingSession:
    catalog = load_catalog(catalog_path) if catalog_path else DEFAULT_CATALOG
    price_source = PriceSource(
        catalog,
        rng=random.Random(config.random_seed),
        step_pct=config.price_step_pct,
        min_price=config.min_price,
    )
    executor = OrderExecutor(price_source, default_initial_balance=config.default_initial_balance)
    store = JsonLedgerStore(config.data_dir)
    return TradingSession(
        executor,
        store,
        max_login_attempts=config.max_login_attempts,
        stdin=stdin,
        stdout=stdout,
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    config = EngineConfig.from_env(
        data_dir=args.data_dir,
        random_seed=args.seed,
        log_level=args.log_level,
    )
    setup_logging(config.log_level, args.log_file)

    try:
        session = build_session(config, args.catalog)
    except ValidationError as e:
        logger.error(f"Cannot start: {e}")
        return 1

    try:
        session.run()
    except KeyboardInterrupt:
        session.save_data()
    return 0


if __name__ == "__main__":
    sys.exit(main())
