# Thin wrapper around the external AI provider: chat, structured chat, vision, transcription, speech
# mediminder/services/ai_provider.py
import base64
import os
import threading
from typing import Type, TypeVar

from langchain_core.exceptions import OutputParserException
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from mediminder.utils.config import settings
from mediminder.utils.logger import logger

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class AIProviderError(Exception):
    """The provider could not be reached or returned an unusable response."""
    pass


class StructuredOutputError(AIProviderError):
    """The provider answered, but not in the requested schema."""
    pass


class AIProvider:
    def __init__(self):
        self._audio_client: AsyncOpenAI | None = None
        self._init_lock = threading.Lock()

    def _require_api_key(self) -> str:
        if not settings.openai_api_key:
            raise AIProviderError("OPENAI_API_KEY is not set; AI features are unavailable.")
        return settings.openai_api_key

    def _chat_model(self, model_name: str | None = None, temperature: float = 0, max_tokens: int | None = None) -> ChatOpenAI:
        return ChatOpenAI(
            api_key=self._require_api_key(),
            model=model_name or settings.chat_model_name,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def _audio(self) -> AsyncOpenAI:
        """Lazily creates the SDK client used for the audio endpoints."""
        with self._init_lock:
            if self._audio_client is None:
                self._audio_client = AsyncOpenAI(api_key=self._require_api_key())
                logger.info("Initialized OpenAI audio client.")
            return self._audio_client

    async def complete(self, prompt: ChatPromptTemplate, inputs: dict, temperature: float = 0, max_tokens: int | None = None) -> str:
        chain = prompt | self._chat_model(temperature=temperature, max_tokens=max_tokens) | StrOutputParser()
        try:
            return await chain.ainvoke(inputs)
        except Exception as e:
            logger.exception(f"Chat completion failed: {e}")
            raise AIProviderError("Chat completion failed") from e

    async def complete_structured(
        self,
        prompt: ChatPromptTemplate,
        inputs: dict,
        schema: Type[SchemaT],
        temperature: float = 0,
        max_tokens: int | None = None,
    ) -> SchemaT:
        """Asks the chat model for a response matching `schema`."""
        llm = self._chat_model(temperature=temperature, max_tokens=max_tokens).with_structured_output(schema)
        chain = prompt | llm
        try:
            result = await chain.ainvoke(inputs)
        except (OutputParserException, ValidationError) as e:
            logger.warning(f"Structured output for {schema.__name__} could not be parsed: {e}")
            raise StructuredOutputError(f"Response did not match {schema.__name__}") from e
        except Exception as e:
            logger.exception(f"Structured chat completion failed: {e}")
            raise AIProviderError("Chat completion failed") from e
        if result is None:
            raise StructuredOutputError(f"Empty structured response for {schema.__name__}")
        return result

    def _image_messages(self, system_prompt: str, user_prompt: str, image_bytes: bytes, mime_type: str) -> list:
        base64_image = base64.b64encode(image_bytes).decode("ascii")
        return [
            SystemMessage(content=system_prompt),
            HumanMessage(content=[
                {"type": "text", "text": user_prompt},
                {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{base64_image}"}},
            ]),
        ]

    async def describe_image(self, system_prompt: str, user_prompt: str, image_bytes: bytes, mime_type: str) -> str:
        llm = self._chat_model(model_name=settings.vision_model_name, max_tokens=settings.vision_max_tokens)
        chain = llm | StrOutputParser()
        try:
            return await chain.ainvoke(self._image_messages(system_prompt, user_prompt, image_bytes, mime_type))
        except Exception as e:
            logger.exception(f"Vision request failed: {e}")
            raise AIProviderError("Image recognition failed") from e

    async def describe_image_structured(
        self, system_prompt: str, user_prompt: str, image_bytes: bytes, mime_type: str, schema: Type[SchemaT]
    ) -> SchemaT:
        llm = self._chat_model(
            model_name=settings.vision_model_name, max_tokens=settings.vision_max_tokens
        ).with_structured_output(schema)
        try:
            result = await llm.ainvoke(self._image_messages(system_prompt, user_prompt, image_bytes, mime_type))
        except (OutputParserException, ValidationError) as e:
            logger.warning(f"Structured vision output for {schema.__name__} could not be parsed: {e}")
            raise StructuredOutputError(f"Response did not match {schema.__name__}") from e
        except Exception as e:
            logger.exception(f"Vision request failed: {e}")
            raise AIProviderError("Image recognition failed") from e
        if result is None:
            raise StructuredOutputError(f"Empty structured response for {schema.__name__}")
        return result

    async def transcribe(self, audio_path: str) -> str:
        try:
            with open(audio_path, "rb") as audio_file:
                transcription = await self._audio().audio.transcriptions.create(
                    model=settings.transcription_model_name,
                    file=(os.path.basename(audio_path), audio_file.read()),
                )
        except AIProviderError:
            raise
        except Exception as e:
            logger.exception(f"Transcription failed for {audio_path}: {e}")
            raise AIProviderError("Transcription failed") from e
        return transcription.text

    async def synthesize_speech(self, text: str, output_path: str) -> str:
        """Writes an mp3 rendition of `text` to `output_path` and returns the path."""
        try:
            speech = await self._audio().audio.speech.create(
                model=settings.tts_model_name,
                voice=settings.tts_voice,
                input=text,
            )
            audio_bytes = speech.content
        except AIProviderError:
            raise
        except Exception as e:
            logger.exception(f"Speech synthesis failed: {e}")
            raise AIProviderError("Speech synthesis failed") from e

        with open(output_path, "wb") as audio_out:
            audio_out.write(audio_bytes)
        logger.debug(f"Wrote {len(audio_bytes)} bytes of speech to {output_path}")
        return output_path


# Instantiate the provider globally or manage via dependency injection
ai_provider = AIProvider()
