"""Script to ingest every PDF in a directory into the vector store."""

import argparse
import asyncio
import logging
from pathlib import Path

from ragpipe.core.config import settings
from ragpipe.core.dependencies import ServiceContainer
from ragpipe.core.exceptions import PipelineError


async def ingest_directory(directory: Path) -> None:
    """Ingest the PDFs found directly under ``directory``."""
    services = ServiceContainer()
    await services.initialize()

    processed = 0
    try:
        for path in sorted(directory.glob("*.pdf")):
            try:
                document = await services.ingestion_service.process_file(path)
            except PipelineError as e:
                print(f"Failed: {path.name}: {e}")
                continue
            processed += 1
            print(f"{path.name}: {document.status.value} ({len(document.chunks)} chunks)")
    finally:
        await services.shutdown()

    print(f"\nProcessed {processed} documents")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("directory", type=Path)
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level)
    asyncio.run(ingest_directory(args.directory))
