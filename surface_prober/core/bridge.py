import concurrent.futures
from typing import Any, List, Protocol, Sequence

from playwright.sync_api import sync_playwright, Error as PlaywrightError
from tqdm import tqdm

from surface_prober.config import PLAYWRIGHT


BROWSERS = ("chromium", "firefox", "webkit")


class BridgeError(Exception):
    """The browser side of a batch failed; the whole run is lost."""


class ExecutionBridge(Protocol):
    def execute(self, batch: Sequence[str]) -> List[Any]:
        ...


def split_batch(batch: Sequence[str], sessions: int) -> List[List[str]]:
    """
    Contiguous, order-preserving chunks, one per session.
    Empty chunks are dropped.
    """
    sessions = max(1, min(sessions, len(batch)))
    size, extra = divmod(len(batch), sessions)

    chunks, start = [], 0
    for i in range(sessions):
        end = start + size + (1 if i < extra else 0)
        if end > start:
            chunks.append(list(batch[start:end]))
        start = end
    return chunks


def batch_expression(probes: Sequence[str]) -> str:
    """All probes of a chunk evaluated as one array literal."""
    return "[" + ",\n".join(probes) + "]"


class PlaywrightBridge:
    """
    Browser Execution Bridge.

    Splits a batch across N browser sessions (one thread and one
    sync_playwright instance each), evaluates every chunk as a single array
    expression and concatenates the results in input order.
    """

    def __init__(
        self,
        sessions: int | None = None,
        browser: str | None = None,
        start_url: str | None = None,
        headless: bool | None = None,
        page_timeout: int | None = None,
        progress: bool = True,
    ):
        self.sessions = sessions or PLAYWRIGHT["sessions"]
        self.browser = browser or PLAYWRIGHT["browser"]
        if self.browser not in BROWSERS:
            raise ValueError(f"Unknown browser: {self.browser!r} (expected one of {', '.join(BROWSERS)})")
        self.start_url = start_url or PLAYWRIGHT["start_url"]
        self.headless = PLAYWRIGHT["headless"] if headless is None else headless
        self.page_timeout = page_timeout or PLAYWRIGHT["page_timeout"]
        self.progress = progress

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def execute(self, batch: Sequence[str]) -> List[Any]:
        if not batch:
            return []

        chunks = split_batch(batch, self.sessions)
        results: List[List[Any] | None] = [None] * len(chunks)

        with concurrent.futures.ThreadPoolExecutor(max_workers=len(chunks)) as executor:
            future_to_index = {
                executor.submit(self._run_chunk, chunk): i
                for i, chunk in enumerate(chunks)
            }
            for future in tqdm(
                concurrent.futures.as_completed(future_to_index),
                total=len(chunks),
                desc=f"    Browser sessions [{len(batch)} probes]",
                leave=False,
                disable=not self.progress,
            ):
                index = future_to_index[future]
                # qualsevol error de sessió fa fallar tot el batch
                results[index] = future.result()

        merged: List[Any] = []
        for chunk, result in zip(chunks, results):
            if not isinstance(result, list) or len(result) != len(chunk):
                raise BridgeError(
                    f"Browser returned {len(result) if isinstance(result, list) else type(result).__name__} "
                    f"results for {len(chunk)} probes"
                )
            merged.extend(result)
        return merged

    # ------------------------------------------------------------------
    # One browser session
    # ------------------------------------------------------------------
    def _run_chunk(self, chunk: List[str]) -> List[Any]:
        try:
            with sync_playwright() as p:
                launcher = getattr(p, self.browser)
                browser = launcher.launch(headless=self.headless)
                try:
                    page = browser.new_context().new_page()
                    page.goto(
                        self.start_url,
                        timeout=self.page_timeout,
                        wait_until="domcontentloaded",
                    )
                    return page.evaluate(batch_expression(chunk))
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise BridgeError(f"{self.browser} session failed: {e}") from e
