#!/usr/bin/env python3
"""
StreamFlix Startup Script
"""

import asyncio
import signal
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


async def run_server(app_path: str, host: str, port: int):
    """Run one uvicorn server"""
    import uvicorn

    config = uvicorn.Config(
        app_path,
        host=host,
        port=port,
        reload=False,
        log_level="info",
        access_log=True,
    )
    server = uvicorn.Server(config)
    await server.serve()


async def main():
    """Run the API and edge servers concurrently with proper shutdown handling"""
    from streamflix.config import settings
    from streamflix.database import init_db

    print("Initializing database...")
    await init_db()
    print("Database initialized successfully.")

    print(f"""
    StreamFlix

      API Server:   http://{settings.HOST}:{settings.PORT}
       - API Documentation: http://{settings.HOST}:{settings.PORT}/docs

      Edge Server:  http://{settings.STREAM_HOST}:{settings.STREAM_PORT}
       - Purpose:   /stream and /providers only

    Press CTRL+C to stop both servers gracefully
    """)

    main_task = asyncio.create_task(
        run_server("streamflix.main:app", settings.HOST, settings.PORT)
    )
    stream_task = asyncio.create_task(
        run_server(
            "streamflix.stream_server:stream_app",
            settings.STREAM_HOST,
            settings.STREAM_PORT,
        )
    )

    shutdown_event = asyncio.Event()

    def handle_shutdown():
        print("\nShutting down servers...")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_shutdown)

    try:
        done, pending = await asyncio.wait(
            [main_task, stream_task, asyncio.create_task(shutdown_event.wait())],
            return_when=asyncio.FIRST_COMPLETED,
        )

        for task in pending:
            task.cancel()

        await asyncio.gather(*pending, return_exceptions=True)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
