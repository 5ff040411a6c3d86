"""Summary consumer process: runs the queue workers until signalled."""
import asyncio
import logging
import os
import signal
from typing import List

from consumer.worker import SummaryWorker
from database.connection import DatabaseConnection
from shared.config import settings
from shared.summarizer import SummarizationGateway

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_workers(db, redis_client, concurrency: int) -> List[SummaryWorker]:
    """Create `concurrency` workers sharing one model client."""
    base_id = settings.worker_id or f"worker-{os.getpid()}"
    gateway = SummarizationGateway()
    return [
        SummaryWorker(db, redis_client, f"{base_id}-{index}", gateway=gateway)
        for index in range(1, concurrency + 1)
    ]


async def main():
    db = await DatabaseConnection.init_mongo()
    redis_client = await DatabaseConnection.init_redis()

    workers = build_workers(db, redis_client, max(1, settings.consumer_concurrency))
    logger.info(f"Starting {len(workers)} summary worker(s): {', '.join(w.worker_id for w in workers)}")

    loop = asyncio.get_running_loop()

    def request_shutdown():
        logger.info("Received shutdown signal, finishing current jobs")
        for worker in workers:
            loop.create_task(worker.stop())

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, request_shutdown)

    try:
        results = await asyncio.gather(*(worker.start() for worker in workers), return_exceptions=True)
        for worker, result in zip(workers, results):
            if isinstance(result, Exception):
                logger.error(f"Worker {worker.worker_id} crashed: {result}")
    finally:
        await DatabaseConnection.close_connections()
        logger.info("Summary consumer stopped")


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
