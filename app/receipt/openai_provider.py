import base64
import os

from agents import Agent, Runner
from agents.exceptions import AgentsException, ModelBehaviorError

from app.receipt.base import (
    EncodingFailure,
    MalformedResult,
    MissingCredential,
    ParsedReceipt,
    ServiceUnavailable,
)
from app.receipt.contract import INSTRUCTIONS

agent = Agent(
    name="Receipt Scanner",
    instructions=INSTRUCTIONS,
    model=os.getenv("OPENAI_MODEL", "gpt-4o"),
    output_type=ParsedReceipt,
)


class OpenAIReceiptExtractor:
    """Receipt extraction using OpenAI Agents SDK with GPT-4o vision."""

    async def extract(self, image_bytes: bytes, content_type: str) -> ParsedReceipt:
        if not os.getenv("OPENAI_API_KEY"):
            raise MissingCredential("OPENAI_API_KEY is not set")
        if not image_bytes:
            raise EncodingFailure("Empty image")

        b64_image = base64.b64encode(image_bytes).decode("utf-8")
        media_type = content_type or "image/jpeg"

        try:
            result = await Runner.run(
                agent,
                input=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "input_text", "text": "Extract the store, date, totals and items from this receipt."},
                            {"type": "input_image", "image_url": f"data:{media_type};base64,{b64_image}"},
                        ],
                    }
                ],
            )
        except ModelBehaviorError as e:
            raise MalformedResult(str(e)) from e
        except AgentsException as e:
            raise ServiceUnavailable(str(e)) from e
        except Exception as e:  # openai transport and API status errors
            raise ServiceUnavailable(f"OpenAI request failed: {e}") from e

        if not isinstance(result.final_output, ParsedReceipt):
            raise MalformedResult("Agent did not return a structured receipt")
        return result.final_output
