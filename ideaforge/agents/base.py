"""
Base Agent Implementation for IdeaForge
LLM client with the structured-generation repair protocol, plus the common
agent wrapper used by every ideation agent.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple, Union

from ..config import AppSettings
from ..core.errors import GenerationFailure
from ..core.schema_registry import type_matches, validate_payload
from ..models import AgentEvent, ChatTurn
from ..prompts import REPAIR_PROMPT_TEMPLATE

logger = logging.getLogger("ideaforge.llm")

Contents = Union[str, List[Dict[str, Any]]]


def _summarize(text: str, limit: int = 500) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class LLMClient(ABC):
    """
    Abstract base class for LLM clients.

    Subclasses implement the two raw transport calls; the structured
    generation and conversation contracts are shared.
    """

    def __init__(self, timeout_seconds: float = 120, strict_validation: bool = False):
        self.timeout_seconds = timeout_seconds
        self.strict_validation = strict_validation

    @abstractmethod
    async def complete(
        self,
        system_instruction: Optional[str],
        contents: Contents,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """Run one generation call and return its text, or None when empty."""
        pass

    @abstractmethod
    def stream_complete(
        self,
        system_instruction: Optional[str],
        contents: Contents,
    ) -> AsyncIterator[str]:
        """Run one generation call, yielding text chunks as they arrive."""
        pass

    async def _call(
        self,
        system_instruction: Optional[str],
        contents: Contents,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        try:
            return await asyncio.wait_for(
                self.complete(system_instruction, contents, response_schema),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise GenerationFailure(
                f"Generation call timed out after {self.timeout_seconds:g}s"
            ) from None
        except GenerationFailure:
            raise
        except Exception as e:
            raise GenerationFailure(f"Generation call failed: {e}") from e

    async def generate(
        self,
        system_instruction: str,
        prompt: str,
        schema: Dict[str, Any],
    ) -> Any:
        """
        Generate JSON that conforms to ``schema``.

        One call in JSON mode; if its text does not parse, exactly one repair
        call asks the model to fix its own output against the same schema.

        Raises:
            GenerationFailure: Empty first response, the repaired output still
                does not parse, or the parsed root is not the schema's type
        """
        text = await self._call(system_instruction, prompt, schema)
        if not text:
            raise GenerationFailure("No response from Gemini")

        try:
            value = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"[generate] Invalid JSON ({e}), issuing repair call")
            repaired = await self._call(
                None,
                REPAIR_PROMPT_TEMPLATE.format(invalid_text=text),
                schema,
            )
            if not repaired:
                raise GenerationFailure("Repair call returned no response") from e
            try:
                value = json.loads(repaired)
            except json.JSONDecodeError as repair_error:
                raise GenerationFailure(
                    f"Model output is not valid JSON after repair: {repair_error}"
                ) from repair_error

        # Artifacts are stored as JSON objects; a null, list or bare string root
        # is unusable even when field-level checks are lenient
        expected = schema.get("type")
        if not type_matches(expected, value):
            raise GenerationFailure(
                f"Model output is not a JSON {expected}: got {type(value).__name__}"
            )

        if self.strict_validation:
            problems = validate_payload(schema, value)
            if problems:
                raise GenerationFailure("Output does not match schema: " + "; ".join(problems))
        return value

    @staticmethod
    def _conversation(history: Sequence[ChatTurn], message: str) -> List[Dict[str, Any]]:
        contents = [turn.model_dump(mode="json") for turn in history]
        contents.append({"role": "user", "parts": [{"text": message}]})
        return contents

    async def converse(
        self,
        system_instruction: str,
        history: Sequence[ChatTurn],
        message: str,
    ) -> str:
        """Replay the full transcript plus ``message`` and return the free-text reply."""
        text = await self._call(system_instruction, self._conversation(history, message))
        if not text:
            raise GenerationFailure("No response from Gemini")
        return text

    async def stream_converse(
        self,
        system_instruction: str,
        history: Sequence[ChatTurn],
        message: str,
    ) -> AsyncIterator[str]:
        """Streaming variant of ``converse``."""
        stream = self.stream_complete(system_instruction, self._conversation(history, message))
        received = False
        try:
            while True:
                try:
                    chunk = await asyncio.wait_for(stream.__anext__(), timeout=self.timeout_seconds)
                except StopAsyncIteration:
                    break
                except asyncio.TimeoutError:
                    raise GenerationFailure(
                        f"Generation stream stalled for {self.timeout_seconds:g}s"
                    ) from None
                except GenerationFailure:
                    raise
                except Exception as e:
                    raise GenerationFailure(f"Generation stream failed: {e}") from e
                if chunk:
                    received = True
                    yield chunk
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        if not received:
            raise GenerationFailure("No response from Gemini")


def _response_text(response: Any) -> Optional[str]:
    # .text raises ValueError when the candidate has no parts (e.g. blocked)
    try:
        return response.text
    except ValueError:
        return None


class GeminiClient(LLMClient):
    """Google Gemini API client implementation."""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        timeout_seconds: float = 120,
        strict_validation: bool = False,
    ):
        if not api_key or not api_key.strip():
            raise ValueError("Gemini API key is required")
        super().__init__(timeout_seconds=timeout_seconds, strict_validation=strict_validation)
        self.model = model
        self.temperature = temperature

        import google.generativeai as genai
        genai.configure(api_key=api_key)
        self._genai = genai

    def _get_model(self, system_instruction: Optional[str]):
        return self._genai.GenerativeModel(self.model, system_instruction=system_instruction)

    def _generation_config(self, response_schema: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        config: Dict[str, Any] = {"temperature": self.temperature}
        if response_schema is not None:
            config["response_mime_type"] = "application/json"
            config["response_schema"] = response_schema
        return config

    async def complete(
        self,
        system_instruction: Optional[str],
        contents: Contents,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        response = await self._get_model(system_instruction).generate_content_async(
            contents,
            generation_config=self._generation_config(response_schema),
        )
        return _response_text(response)

    async def stream_complete(
        self,
        system_instruction: Optional[str],
        contents: Contents,
    ) -> AsyncIterator[str]:
        response = await self._get_model(system_instruction).generate_content_async(
            contents,
            generation_config=self._generation_config(),
            stream=True,
        )
        async for chunk in response:
            text = _response_text(chunk)
            if text:
                yield text


def create_llm_client(config: AppSettings) -> LLMClient:
    """Factory function to create the configured LLM client."""
    if not config.gemini:
        raise ValueError("Gemini configuration not provided")
    return GeminiClient(
        api_key=config.gemini.api_key.get_secret_value(),
        model=config.gemini.model,
        temperature=config.gemini.temperature,
        timeout_seconds=config.gemini.timeout_seconds,
        strict_validation=config.pipeline.strict_schema_validation,
    )


class BaseAgent(ABC):
    """Base class for all IdeaForge agents."""

    def __init__(
        self,
        name: str,
        llm_client: LLMClient,
        system_prompt: str,
    ):
        self.name = name
        self.llm_client = llm_client
        self.system_prompt = system_prompt

    @abstractmethod
    async def process(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """Process input and generate output."""
        pass

    async def generate_with_logging(
        self,
        user_prompt: str,
        schema: Dict[str, Any],
        project_id: str,
    ) -> Tuple[Any, AgentEvent, List[str]]:
        """Generate structured output with audit logging and schema checks."""
        start_time = time.time()

        result = await self.llm_client.generate(
            system_instruction=self.system_prompt,
            prompt=user_prompt,
            schema=schema,
        )

        duration_ms = int((time.time() - start_time) * 1000)
        problems = validate_payload(schema, result)
        for problem in problems:
            logger.warning(f"[{self.name}] project={project_id} schema problem: {problem}")

        event = AgentEvent(
            project_id=project_id,
            agent_name=self.name,
            action="generate",
            input_summary=_summarize(user_prompt),
            output_summary=_summarize(json.dumps(result)),
            duration_ms=duration_ms,
        )
        logger.info(f"[{self.name}] project={project_id} generated in {duration_ms}ms")

        return result, event, problems
