"""
Script Runner - Sandboxed script execution for client-side rendered content.

Some websites build their listings in the browser after page load. For those,
a strategy hands a JavaScript snippet to a ``ScriptRunner``, which loads the
target document into an isolated browser context, evaluates the snippet
(a plain value or a promise) and returns the resolved value.

Every execution is bounded by a wall-clock timeout and acquires its own
browser session, which is released on every exit path.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

from mangaweave.core.config_schemas import DEFAULT_USER_AGENT
from mangaweave.core.exceptions import ConfigurationError, OperationTimeoutError, ParseError, UnreachableError


logger = logging.getLogger(__name__)


# Resolves the evaluated snippet (value or promise) into the async callback
_PROMISE_BRIDGE = """
const done = arguments[arguments.length - 1];
const fail = error => done({ error: String((error && error.message) || error) });
try {
    Promise.resolve(window.eval(arguments[0])).then(value => done({ value: value }), fail);
} catch (error) {
    fail(error);
}
"""


def _remaining(deadline: float, url: str, timeout: float) -> float:
    """Seconds left before ``deadline``, failing once it has passed."""
    left = deadline - time.monotonic()
    if left <= 0:
        raise OperationTimeoutError(f"Script execution for {url} timed out", timeout=timeout, url=url)
    return left


class ScriptRunner(ABC):
    """
    Base class for script execution backends.

    Subclasses implement ``_evaluate``; ``execute`` enforces the timeout and
    the concurrency limit for all backends. A session slot is only freed once
    ``_evaluate`` has returned, including after a timeout.
    """

    def __init__(self, timeout: float = 30.0, max_sessions: int = 2):
        """
        Initialize the runner.

        Args:
            timeout: Default bound in seconds for one execution
            max_sessions: Maximum number of concurrent isolated contexts
        """
        self.timeout = timeout
        self.max_sessions = max_sessions
        self._slots = asyncio.Semaphore(max_sessions)

    async def execute(self, url: str, script: str, timeout: Optional[float] = None, delay: float = 0.0) -> Any:
        """
        Evaluate a script inside the document at ``url``.

        Args:
            url: Document to load
            script: JavaScript expression evaluating to a value or a promise
            timeout: Bound in seconds (defaults to the runner's timeout)
            delay: Seconds to wait after load before evaluating

        Returns:
            The resolved value of the script

        Raises:
            OperationTimeoutError: If the script does not resolve within the bound
            ParseError: If the script throws or rejects
            UnreachableError: If the document cannot be loaded
        """
        bound = timeout or self.timeout

        async def run() -> Any:
            async with self._slots:
                return await self._evaluate(url, script, bound, delay)

        try:
            return await asyncio.wait_for(run(), bound)
        except asyncio.TimeoutError as e:
            raise OperationTimeoutError(
                f"Script execution for {url} did not resolve within {bound}s",
                timeout=bound,
                url=url,
            ) from e

    @abstractmethod
    async def _evaluate(self, url: str, script: str, timeout: float, delay: float) -> Any:
        """Load ``url`` in an isolated context and evaluate ``script``."""

    async def close(self) -> None:
        """Release backend resources."""


class SeleniumScriptRunner(ScriptRunner):
    """Script runner backed by a headless Chrome driven through Selenium."""

    def __init__(
        self,
        timeout: float = 30.0,
        max_sessions: int = 2,
        headless: bool = True,
        driver_path: Optional[str] = None,
        window_size: str = "1920,1080",
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        super().__init__(timeout=timeout, max_sessions=max_sessions)
        self.headless = headless
        self.driver_path = driver_path
        self.window_size = window_size
        self.user_agent = user_agent

    async def _evaluate(self, url: str, script: str, timeout: float, delay: float) -> Any:
        worker = asyncio.ensure_future(asyncio.to_thread(self._evaluate_blocking, url, script, timeout, delay))
        try:
            return await asyncio.shield(worker)
        except asyncio.CancelledError:
            # The session slot stays taken until the browser has been quit
            await asyncio.wait({worker})
            raise

    def _create_driver(self) -> Any:
        """Start a fresh browser session."""
        try:
            from selenium import webdriver
            from selenium.webdriver.chrome.options import Options
            from selenium.webdriver.chrome.service import Service
        except ImportError as e:
            raise ConfigurationError(
                "Selenium is required for script-based extraction",
                details="Install with: pip install selenium",
            ) from e

        options = Options()
        if self.headless:
            options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument("--disable-gpu")
        options.add_argument("--log-level=3")
        options.add_argument(f"--window-size={self.window_size}")
        options.add_argument(f"--user-agent={self.user_agent}")

        service = Service(executable_path=self.driver_path) if self.driver_path else Service()
        return webdriver.Chrome(service=service, options=options)

    def _evaluate_blocking(self, url: str, script: str, timeout: float, delay: float) -> Any:
        from selenium.common.exceptions import TimeoutException, WebDriverException

        started = time.monotonic()
        deadline = started + timeout
        try:
            driver = self._create_driver()
        except WebDriverException as e:
            raise UnreachableError(f"Failed to start browser session: {e.msg}", url=url) from e

        try:
            driver.set_page_load_timeout(_remaining(deadline, url, timeout))
            driver.get(url)
            if delay > 0:
                time.sleep(min(delay, _remaining(deadline, url, timeout)))
            driver.set_script_timeout(_remaining(deadline, url, timeout))
            outcome = driver.execute_async_script(_PROMISE_BRIDGE, script)
        except TimeoutException as e:
            raise OperationTimeoutError(f"Script execution for {url} timed out", timeout=timeout, url=url) from e
        except WebDriverException as e:
            raise UnreachableError(f"Browser failed to process {url}: {e.msg}", url=url) from e
        finally:
            driver.quit()
            logger.debug(f"Browser session for {url} released after {time.monotonic() - started:.2f}s")

        if not isinstance(outcome, dict):
            raise ParseError(f"Script for {url} returned no result", url=url)
        if 'error' in outcome:
            raise ParseError(f"Script for {url} failed: {outcome['error']}", url=url, details=outcome['error'])
        return outcome.get('value')


__all__ = ["ScriptRunner", "SeleniumScriptRunner"]
