"""Main entry point for the Seal launcher MCP server."""
import asyncio

from seal_launcher.server import main


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
