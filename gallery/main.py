"""Application entrypoint."""

from __future__ import annotations

import asyncio
import sys

import httpx

from gallery.app import Gallery
from gallery.config import get_settings
from gallery.logging import configure_logging, logger

MAX_PAGES = 10


async def main(term: str = "") -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json=settings.log_json)

    async with httpx.AsyncClient() as client:
        async with Gallery(settings, client, initial_term=term) as gallery:
            logger.info("gallery_starting", environment=settings.environment, term=term)
            task = gallery.start()
            for _ in range(MAX_PAGES):
                if task is None:
                    break
                await asyncio.gather(task, return_exceptions=True)
                if gallery.state().status == "error":
                    break
                task = gallery.next_page()

            gallery.scroll_to(gallery.viewport.total_height)
            result = gallery.render()
            if not result.ok:
                logger.error("gallery_render_failed", error=str(result.error))
                return
            view = result.value
            logger.info(
                "gallery_rendered",
                term=view.term,
                status=view.status,
                pages=view.page,
                total_height=view.total_height,
                visible=[row.record.id for row in view.rows],
                message=view.message,
            )


def run() -> None:
    asyncio.run(main(" ".join(sys.argv[1:])))


if __name__ == "__main__":
    run()
