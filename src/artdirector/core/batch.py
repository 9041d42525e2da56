"""Sequential batch runner for CSV-driven generation.

A batch runs in two passes over the task list:

1. **analyze_all** - one text-model call per pending task turns its row
   context into a subject (``pending -> ready``).
2. **generate_all** - one prompt and one image per ready task
   (``ready -> generated``).

Calls are made one at a time with a fixed pause between them, to stay under
provider rate limits.  A failing task is marked ``error`` and the batch moves
on; tasks in any other status are left untouched.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from artdirector.core.analysis import extract_subject
from artdirector.core.csv_parser import CSVTask, TaskStatus
from artdirector.core.errors import ArtDirectorError
from artdirector.core.models import StyleDescriptor
from artdirector.core.prompt_generator import PromptGenerator
from artdirector.core.style_presets import is_custom_style

if TYPE_CHECKING:
    from artdirector.core.adapters.openai import OpenAIAdapter

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
TaskCallback = Callable[[CSVTask], Awaitable[None]]


class CSVBatchRunner:
    """Run subject extraction and image generation over CSV tasks.

    Args:
        client: OpenAI adapter (or a fake with the same surface).
        generator: Prompt generator holding the preset table.
        analysis_delay: Seconds between two subject extractions.
        generation_delay: Seconds between two image generations.
        sleep: Awaitable used for the pauses; tests pass a no-op.
    """

    def __init__(
        self,
        client: OpenAIAdapter,
        generator: PromptGenerator,
        analysis_delay: float = 0.5,
        generation_delay: float = 2.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.generator = generator
        self.analysis_delay = analysis_delay
        self.generation_delay = generation_delay
        self._sleep = sleep

    async def analyze_all(self, tasks: list[CSVTask]) -> list[CSVTask]:
        """Extract a subject for every pending task."""
        pending = [task for task in tasks if task.status is TaskStatus.PENDING]
        logger.info(f"Analysing {len(pending)} CSV task(s)")

        for position, task in enumerate(pending):
            try:
                subject = await extract_subject(self.client, task.context)
            except ArtDirectorError as e:
                logger.warning(f"Subject extraction failed for row {task.row_index + 1}: {e}")
                task.mark_error(str(e))
            else:
                task.mark_ready(subject, task.context)

            if position < len(pending) - 1:
                await self._sleep(self.analysis_delay)

        return tasks

    async def generate_all(
        self,
        tasks: list[CSVTask],
        style_id: str,
        custom_style: StyleDescriptor | None = None,
        template_id: str | None = None,
        model: str | None = None,
        size: str = "1024x1024",
        quality: str = "standard",
        on_generated: TaskCallback | None = None,
    ) -> list[CSVTask]:
        """Generate one image for every ready task.

        The style is resolved once before the loop, so an unknown style
        fails the whole request instead of every task.

        Args:
            on_generated: Awaited after each successful generation (used
                to record history and save files).  A failure there marks
                nothing; it is logged and the batch continues.

        Raises:
            StyleNotFoundError: Unknown preset style or template.
            PromptError: Custom style without a descriptor.
        """
        self.generator.resolve_style(style_id, custom_style)
        if template_id and not is_custom_style(style_id):
            self.generator.presets.template(style_id, template_id)

        ready = [task for task in tasks if task.status is TaskStatus.READY]
        logger.info(f"Generating {len(ready)} image(s) with style {style_id}")

        for position, task in enumerate(ready):
            try:
                prompt = self.generator.generate_prompt(
                    style_id, task.subject, template_id=template_id, custom_style=custom_style
                )
                result = await self.client.generate_image(
                    prompt, model=model, size=size, quality=quality
                )
            except ArtDirectorError as e:
                logger.warning(f"Generation failed for row {task.row_index + 1}: {e}")
                task.mark_error(str(e))
            else:
                task.mark_generated(result["url"], prompt)
                if on_generated is not None:
                    try:
                        await on_generated(task)
                    except (ArtDirectorError, OSError) as e:
                        logger.error(f"Post-generation step failed for row {task.row_index + 1}: {e}")

            if position < len(ready) - 1:
                await self._sleep(self.generation_delay)

        return tasks
