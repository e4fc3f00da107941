"""PDF text extraction service."""

import asyncio
import logging
from typing import BinaryIO, List

from pypdf import PdfReader

from ragpipe.core.exceptions import ExtractionError
from ragpipe.models.document import PageContent

logger = logging.getLogger(__name__)


class PdfExtractor:
    """Extracts page-numbered plain text from PDF streams."""

    content_type = "application/pdf"

    def _read_pages(self, stream: BinaryIO) -> List[PageContent]:
        try:
            reader = PdfReader(stream)
            return [
                PageContent(page_number=number, text=page.extract_text() or "")
                for number, page in enumerate(reader.pages, start=1)
            ]
        except Exception as e:
            raise ExtractionError(
                f"Failed to extract text from PDF: {str(e)}") from e

    async def extract_pages(self, stream: BinaryIO) -> List[PageContent]:
        """
        Extract the text of every page.

        Args:
            stream: Binary PDF stream.

        Returns:
            Pages in document order, numbered from 1.

        Raises:
            ExtractionError: If the stream is not a readable PDF.
        """
        pages = await asyncio.to_thread(self._read_pages, stream)
        logger.info(f"Extracted {len(pages)} pages")
        return pages
