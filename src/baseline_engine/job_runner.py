"""
Job runner for orchestrating the full baseline check pipeline.

Manages fetching, extraction and comparison (or baseline update) for multiple pages.
"""

import asyncio
import logging
from datetime import datetime
from typing import List

from .comparator import BaselineComparator
from .config import AuditConfig
from .extractor import MetadataExtractor
from .fetcher import Fetcher, RawHTMLFetcher, RenderedHTMLFetcher
from .models import PageCheck, PageTarget, RunResult
from .storage import FileBaselineStore, StorageError

logger = logging.getLogger(__name__)


class JobRunner:
    """
    Runs baseline checks for every configured page.

    Pages are processed concurrently; each page has its own baseline file so
    no coordination between pages is needed.
    """

    def __init__(
        self,
        config: AuditConfig,
        fetcher: Fetcher | None = None,
        comparator: BaselineComparator | None = None,
    ):
        """
        Initialize the job runner.

        Args:
            config: Run configuration
            fetcher: Page fetcher (default: rendered or raw fetcher chosen from config)
            comparator: Baseline comparator (default: file store under config.baseline_directory)
        """
        self.config = config
        self.fetcher = fetcher or self._default_fetcher(config)
        self.comparator = comparator or BaselineComparator(
            FileBaselineStore(config.baseline_directory)
        )
        self.extractor = MetadataExtractor()

    async def run_job_async(self, update: bool = False) -> RunResult:
        """
        Run a job asynchronously.

        Args:
            update: Overwrite baselines instead of comparing against them

        Returns:
            RunResult containing one PageCheck per page
        """
        started_at = datetime.now()
        pages = self._deduplicate(self.config.pages)

        logger.info(
            "%s %s baselines for %d page(s)",
            "Updating" if update else "Checking",
            self.config.kind.value,
            len(pages),
        )

        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        tasks = [self._process_page(page, semaphore, update) for page in pages]
        checks: List[PageCheck] = await asyncio.gather(*tasks)

        return RunResult(
            started_at=started_at,
            finished_at=datetime.now(),
            kind=self.config.kind,
            update_mode=update,
            checks=list(checks),
        )

    def run_job(self, update: bool = False) -> RunResult:
        """
        Run a job synchronously.

        Convenience method that wraps run_job_async.
        """
        return asyncio.run(self.run_job_async(update=update))

    def _deduplicate(self, pages: List[PageTarget]) -> List[PageTarget]:
        """Drop repeated page names, keeping the first occurrence."""
        seen = set()
        unique = []
        for page in pages:
            if page.name in seen:
                logger.warning("Skipping duplicate page name: %s", page.name)
                continue
            seen.add(page.name)
            unique.append(page)
        return unique

    async def _process_page(
        self, page: PageTarget, semaphore: asyncio.Semaphore, update: bool
    ) -> PageCheck:
        """
        Process a single page through the full pipeline.

        Args:
            page: Page to process
            semaphore: Semaphore for concurrency control
            update: Whether to update the baseline instead of comparing

        Returns:
            PageCheck containing results
        """
        kind = self.config.kind
        check = PageCheck(target=page, kind=kind)

        async with semaphore:
            logger.info("Extracting %s from: %s", kind.value, page.url)
            fetch_result, fetch_error = await self.fetcher.fetch(page.url, timeout=self.config.timeout)

        if fetch_error or fetch_result is None:
            check.fetch_errors.append(fetch_error or "No content received")
            return check

        try:
            check.extracted = self.extractor.extract(fetch_result.html, kind)
        except Exception as e:
            check.extraction_errors.append(f"{kind.value} extraction failed: {str(e)}")
            return check

        try:
            if update:
                check.baseline_file = self.comparator.update_baseline(
                    check.extracted, page.name, kind
                )
                check.baseline_updated = True
            else:
                check.comparison = self.comparator.compare(check.extracted, page.name, kind)
        except StorageError as e:
            logger.error("Baseline storage failed for %s: %s", page.name, e)
            check.storage_errors.append(str(e))

        return check

    def _default_fetcher(self, config: AuditConfig) -> Fetcher:
        if config.rendered:
            return RenderedHTMLFetcher(
                user_agent=config.user_agent, settle_delay=config.settle_delay
            )
        return RawHTMLFetcher(user_agent=config.user_agent)
