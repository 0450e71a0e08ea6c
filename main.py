"""Mining Agent

Simple CLI for running the mining agent without the API server.
"""

import argparse
import asyncio

from mining_agent.api.deps import get_discovery_agent, get_orchestrator
from mining_agent.services.progress import get_progress


async def watch_progress(run_id: str, interval: float = 0.5):
    """Print each new progress message of a run until cancelled."""
    last_message = None
    while True:
        state = get_progress(run_id)
        if state.message != last_message:
            last_message = state.message
            step = f"[{state.current_step}/{state.total_steps}]" if state.total_steps else ""
            print(f"[{state.stage.value}] {step} {state.message}".replace("  ", " "))
        await asyncio.sleep(interval)


async def _with_progress(agent, coro):
    watcher = asyncio.create_task(watch_progress(agent.reporter.run_id))
    try:
        return await coro
    finally:
        await asyncio.sleep(0)
        watcher.cancel()
        final = get_progress(agent.reporter.run_id)
        print(f"[{final.stage.value}] {final.message}")


async def run_sources():
    """Collect from every configured source and process the documents."""
    orchestrator = get_orchestrator()
    results = await _with_progress(orchestrator, orchestrator.run())

    print(f"\n{'='*50}")
    for result in results:
        print(
            f"{result.source}: {result.documents_found} documents, "
            f"{result.projects_created} created, {result.projects_updated} updated"
        )
        for error in result.errors:
            print(f"   [!] {error}")


async def run_discovery():
    """Search the web for new projects and save the ones not yet stored."""
    agent = get_discovery_agent()
    result = await _with_progress(agent, agent.run())
    print(f"\n{result.message}")


def main():
    parser = argparse.ArgumentParser(description="Mining Agent")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("run", help="Collect and process documents from all sources")
    subparsers.add_parser("discover", help="Discover new projects through web search")

    args = parser.parse_args()

    if args.command == "run":
        asyncio.run(run_sources())
    else:
        asyncio.run(run_discovery())


if __name__ == "__main__":
    main()
