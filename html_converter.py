# html_converter.py
import asyncio
import threading
from typing import Callable, Optional

import html2text
from loguru import logger as default_logger

import config


def looks_like_html(text: str) -> bool:
    return text.lstrip().startswith("<")


def html_to_text(html: str, width: int = config.HTML_TEXT_WIDTH) -> str:
    h = html2text.HTML2Text()
    h.ignore_links = True
    h.ignore_images = True
    h.body_width = width
    return h.handle(html)


def _settle(fut: "asyncio.Future", result, error) -> None:
    if fut.done():
        return
    if error is not None:
        fut.set_exception(error)
    else:
        fut.set_result(result)


def _consume_result(fut: "asyncio.Future") -> None:
    # abandoned futures still finish; read the outcome so asyncio doesn't report it
    if not fut.cancelled():
        fut.exception()


def spawn_render(loop: asyncio.AbstractEventLoop, render: Callable[[str], str], html: str) -> "asyncio.Future":
    """Run `render(html)` on its own daemon thread and return a loop future for it.

    Every render has a thread to itself, so a stuck render never delays another one.
    """
    fut = loop.create_future()

    def run():
        result, error = None, None
        try:
            result = render(html)
        except Exception as e:
            error = e
        try:
            loop.call_soon_threadsafe(_settle, fut, result, error)
        except RuntimeError:
            # loop closed while the render was still running; nobody is waiting
            pass

    threading.Thread(target=run, name="html2text", daemon=True).start()
    return fut


class HtmlConverter:
    """Renders HTML to plain text on a worker thread under a wall-clock deadline.

    On failure or timeout the original HTML is returned unchanged. A timed-out
    render is left running on its thread; it is never awaited again.
    """

    def __init__(
        self,
        timeout: float = config.HTML_CONVERSION_TIMEOUT_MS / 1000,
        render: Callable[[str], str] = html_to_text,
        log=default_logger,
    ):
        self.timeout = timeout
        self.render = render
        self.log = log

    async def convert(self, html: str, timeout: Optional[float] = None) -> str:
        deadline = self.timeout if timeout is None else timeout
        fut = spawn_render(asyncio.get_running_loop(), self.render, html)

        done, _ = await asyncio.wait({fut}, timeout=deadline)
        if not done:
            fut.add_done_callback(_consume_result)
            self.log.warning(f"HTML to text conversion timed out after {deadline:.3f}s, keeping raw HTML")
            return html

        try:
            text = fut.result()
        except Exception as e:
            self.log.warning(f"HTML to text conversion failed, keeping raw HTML: {e!r}")
            return html

        self.log.debug("HTML to text conversion succeeded")
        return text
