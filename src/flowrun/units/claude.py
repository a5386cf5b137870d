"""claude_unit — Anthropic SDK-based unit for prompting an LLM inside a workflow."""

from collections.abc import Callable
from typing import Any

import anthropic

from flowrun.core.errors import is_recoverable
from flowrun.core.node import Unit
from flowrun.core.resolver import Inputs
from flowrun.core.retry import RetryPolicy

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_MAX_TOKENS = 4096

TRANSIENT_ERRORS = (anthropic.APIConnectionError, anthropic.RateLimitError, anthropic.InternalServerError)


def retry_transient(error: BaseException) -> bool:
    """Retry connection problems, rate limits and server-side errors."""
    return isinstance(error, TRANSIENT_ERRORS) or is_recoverable(error)


def claude_unit(
    name: str,
    prompt_template: str,
    *,
    inputs: dict[str, Any] | None = None,
    model: str = DEFAULT_MODEL,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    system: str | None = None,
    client: anthropic.AsyncAnthropic | None = None,
    retry: RetryPolicy | None = None,
    retry_if: Callable[[BaseException], bool] = retry_transient,
) -> Unit:
    """Run a prompt through the Anthropic Messages API.

    The prompt is rendered from the unit's inputs, so ``{text}`` in the
    template is whatever the ``text`` input resolves to, e.g. an earlier
    node's output bound with ``inputs={"text": "{Fetch.body}"}``.

    The client is created lazily on first use unless one is passed in.
    Outputs: ``response``, ``model``, ``input_tokens``, ``output_tokens``.
    """
    holder: dict[str, anthropic.AsyncAnthropic] = {}
    if client is not None:
        holder["client"] = client

    def _get_client() -> anthropic.AsyncAnthropic:
        if "client" not in holder:
            holder["client"] = anthropic.AsyncAnthropic()
        return holder["client"]

    async def _call(resolved: Inputs) -> dict[str, Any]:
        kwargs: dict = {
            "model": resolved.resolve("model", model),
            "max_tokens": resolved.resolve("max_tokens", max_tokens),
            "messages": [{"role": "user", "content": resolved.render(prompt_template)}],
        }
        if system:
            kwargs["system"] = resolved.render(system)

        response = await _get_client().messages.create(**kwargs)
        text = response.content[0].text if response.content else ""

        return {
            "response": text,
            "model": response.model,
            "input_tokens": response.usage.input_tokens,
            "output_tokens": response.usage.output_tokens,
        }

    return Unit(
        name=name,
        run=_call,
        description=f"Prompt {model}",
        inputs=inputs or {},
        retry=retry,
        retry_if=retry_if,
    )
