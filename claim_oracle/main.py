"""Command-line entry point for the claim oracle agent."""

import argparse
import asyncio
import logging
from typing import List, Optional

from .domain.services.price_claim_workflow import PriceClaimWorkflow, WorkflowConfig
from .infrastructure.dependencies import ServiceContainer
from .infrastructure.ledger.verdict_registry_adapter import VerdictRegistryAdapter
from .infrastructure.oracles.coingecko_adapter import CoinGeckoAdapter
from .infrastructure.scheduler import CycleScheduler
from .infrastructure.settings import AgentSettings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="claim-oracle",
        description="Fact-check measurable claims from the feed and record verdict proofs on-chain.",
    )
    parser.add_argument("--once", action="store_true", help="run a single cycle and exit")
    parser.add_argument("--demo", action="store_true", help="verify the built-in demo posts once")
    parser.add_argument(
        "--workflow",
        metavar="CONFIG.json",
        help="run the scheduled ETH price-claim workflow with this config",
    )
    return parser


async def _wait_forever() -> None:
    await asyncio.Event().wait()


async def run_agent(settings: AgentSettings, once: bool, demo: bool) -> None:
    container = ServiceContainer(settings)
    await container.initialize()
    cycle = container.get_fact_check_cycle()
    try:
        if once or demo:
            await cycle.run_cycle(demo=demo)
            return

        scheduler = CycleScheduler()
        scheduler.add_interval_job(cycle.run_cycle, settings.poll_interval_minutes, "fact-check-cycle")
        scheduler.start()
        try:
            await _wait_forever()
        finally:
            scheduler.shutdown()
    finally:
        await container.shutdown()


async def run_workflow(settings: AgentSettings, config: WorkflowConfig, once: bool) -> None:
    market = CoinGeckoAdapter(config=settings.coingecko_config())
    ledger_config = settings.ledger_config().model_copy(update={
        "contract_address": config.registry_address,
        "gas_limit": config.evms[0].gas_limit,
    })
    workflow = PriceClaimWorkflow(config, market, VerdictRegistryAdapter(config=ledger_config))

    await market.initialize()
    try:
        if once:
            result = await workflow.run()
            logger.info(f"✅ Workflow result: {result}")
            return

        scheduler = CycleScheduler()
        scheduler.add_cron_job(workflow.run, config.schedule, "price-claim-workflow")
        scheduler.start()
        try:
            await _wait_forever()
        finally:
            scheduler.shutdown()
    finally:
        await market.shutdown()


def main(argv: Optional[List[str]] = None) -> None:
    """Run the agent."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    settings = AgentSettings.from_env()

    try:
        if args.workflow:
            asyncio.run(run_workflow(settings, WorkflowConfig.from_file(args.workflow), args.once))
        else:
            asyncio.run(run_agent(settings, args.once, args.demo))
    except KeyboardInterrupt:
        logger.info("👋 Stopped")


if __name__ == "__main__":
    main()
