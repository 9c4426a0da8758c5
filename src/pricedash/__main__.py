"""
Entry point for the terminal dashboard.

Usage:
    python -m pricedash
    pricedash  # if installed via pip

Configuration comes from PRICEDASH_* environment variables or .env, e.g.
    PRICEDASH_INITIAL_SOURCES='["Binance", "Coinbase"]'
"""

import asyncio
import sys


# Try to use uvloop for better performance
try:
    import uvloop

    UVLOOP_AVAILABLE = True
except ImportError:
    UVLOOP_AVAILABLE = False


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from pricedash import __version__
    from pricedash.config.settings import get_settings
    from pricedash.core.session import DashboardSession
    from pricedash.telemetry.logger import setup_logging
    from pricedash.telemetry.reporter import CLIReporter

    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║     PRICE DASHBOARD v{__version__:<41}║
║                                                               ║
║     Cross-exchange price comparison                           ║
╚═══════════════════════════════════════════════════════════════╝
    """
    )

    try:
        settings = get_settings()
    except Exception as e:
        print(f"Configuration error: {e}")
        print("\nSettings are read from PRICEDASH_* variables or a .env file, e.g.:")
        print("  PRICEDASH_API_URL=http://localhost:5000/arbitrage")
        print('  PRICEDASH_INITIAL_SOURCES=["Binance","Coinbase"]')
        return 1

    use_uvloop = settings.use_uvloop and UVLOOP_AVAILABLE

    print("Configuration:")
    print(f"  Endpoint:       {settings.api_url}")
    print(f"  Symbol:         {settings.default_symbol.value}")
    sources = ", ".join(s.value for s in settings.initial_sources) or "none"
    print(f"  Sources:        {sources}")
    print(f"  Interval:       {settings.fetch_interval_ms} ms")
    print(f"  Debounce:       {settings.debounce_ms} ms")
    print(f"  History:        {settings.history_capacity} entries")
    print(f"  Ordering:       {settings.response_ordering.value}")
    print(f"  uvloop:         {'Enabled' if use_uvloop else 'Disabled'}")
    print()

    if not settings.initial_sources:
        print("No sources enabled: nothing will be fetched.")
        print('Set PRICEDASH_INITIAL_SOURCES, e.g. ["Binance","Coinbase"].')
        print()

    async_logger = setup_logging(settings.log_level, settings.log_file)

    async def run_dashboard() -> int:
        session = DashboardSession(settings)
        reporter = CLIReporter(session)

        try:
            await session.start()
            await reporter.run(settings.report_interval)
            return 0

        except asyncio.CancelledError:
            return 0

        except Exception as e:
            print(f"\nFatal error: {e}")
            import traceback

            traceback.print_exc()
            return 1

        finally:
            reporter.stop()
            await session.stop()
            print(reporter.status_line())

    try:
        if use_uvloop:
            return uvloop.run(run_dashboard())
        return asyncio.run(run_dashboard())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 0
    finally:
        async_logger.stop()


if __name__ == "__main__":
    sys.exit(main())
