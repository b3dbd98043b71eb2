"""
Image generation flows: iPhone-style photos and text overlays.

Both are multi-step: a text model writes the image prompt, then an image
model renders it. Steps run in order and any provider error aborts the flow.
"""

from __future__ import annotations

import logging
from typing import Any

from ...errors import UpstreamError
from ...providers.base import ImageModel, InlineMedia, TextModel

logger = logging.getLogger(__name__)

# Editor format -> aspect ratio
ASPECT_RATIOS = {
    "square": "1:1",
    "landscape": "16:9",
    "portrait": "4:5",  # Meta feeds
    "vertical": "9:16",
}

DESCRIBE_PERSON_PROMPT = """Describe the main person in this image in precise detail for recreating them in another image. Include:
- Exact physical appearance (age, gender, ethnicity, face shape, skin tone)
- Hair (color, length, style, texture)
- Distinctive features (facial features, expressions, any unique characteristics)
- Current clothing and style

Be specific and detailed. This description will be used to generate a new image of the SAME person in a different pose or setting. Output only the description, no other text."""

IPHONE_PROMPT = """You are an expert at writing prompts for AI image generation.
Transform the user's text into a detailed prompt for generating a photorealistic image
that looks like it was shot on an iPhone.

The output should describe:
- Natural iPhone camera aesthetic (slight depth of field, natural lighting)
- Realistic composition as if someone casually took the photo
- Specific details that make it feel authentic and candid
- Modern iPhone quality (sharp, vibrant but natural colors){person_part}

Keep it under 200 words. Only output the prompt itself, no explanations.{extra_part}

User's text: {text}"""

OVERLAY_PROMPT = """You are an expert at writing prompts for AI image generation.

I have an existing image and I want to add text overlay to it. Create a detailed prompt that describes:
1. The original image (I'll describe it below)
2. The text "{text}" overlaid on it
3. The text style: {style}

Make the prompt describe a complete image with the text naturally integrated.
Keep it under 150 words. Only output the prompt, no explanations.

The image I'm working with appears to be a photorealistic photo. Add the text "{text}" to it."""

DEFAULT_OVERLAY_STYLE = "bold white text with subtle shadow, positioned for maximum impact"


def aspect_ratio_for(fmt: str | None) -> str:
    return ASPECT_RATIOS.get(fmt or "square", "1:1")


async def describe_person(vision: TextModel, reference_image: str) -> str:
    """
    Describe the person in a reference image. Failure is not fatal for the
    photo flow: it is logged and the photo is generated without the description.
    """
    try:
        image = InlineMedia.from_data_url(reference_image)
        description = await vision.generate(DESCRIBE_PERSON_PROMPT, image=image)
    except (UpstreamError, ValueError) as e:
        logger.warning("Reference image description failed, continuing without it: %s", e)
        return ""
    logger.info("Person description: %s", description[:200])
    return description


async def generate_iphone_photo(
    *,
    vision: TextModel,
    prompt_writer: TextModel,
    image_model: ImageModel,
    text: str | None,
    extra_instructions: str | None = None,
    reference_image: str | None = None,
    fmt: str | None = "square",
) -> dict[str, Any]:
    """
    Generate a candid, iPhone-looking photo.

    Steps:
        1. (optional) describe the person in the reference image
        2. draft the image prompt
        3. render the image

    Returns:
        {"prompt": str, "imageUrl": data URL}
    """
    person_description = ""
    if reference_image:
        person_description = await describe_person(vision, reference_image)

    person_part = (
        f"\n\nIMPORTANT: The image must feature this EXACT person (maintain their appearance precisely):\n{person_description}"
        if person_description
        else ""
    )
    extra_part = (
        f"\n\nAdditional instructions from the user: {extra_instructions}"
        if extra_instructions
        else ""
    )

    image_prompt = await prompt_writer.generate(
        IPHONE_PROMPT.format(
            person_part=person_part,
            extra_part=extra_part,
            text=text or "a casual candid photo",
        )
    )
    if not image_prompt:
        raise UpstreamError("Empty prompt generated", code="EMPTY_PROMPT")

    aspect_ratio = aspect_ratio_for(fmt)
    logger.info("Rendering photo with %s at %s", image_model.name, aspect_ratio)
    image_url = await image_model.generate(image_prompt, aspect_ratio=aspect_ratio)

    return {"prompt": image_prompt, "imageUrl": image_url}


async def generate_text_overlay(
    *,
    prompt_writer: TextModel,
    image_model: ImageModel,
    text: str,
    style: str | None = None,
) -> dict[str, Any]:
    """
    Re-render an image with a text overlay.

    Returns:
        {"imageUrl": data URL}
    """
    overlay_prompt = await prompt_writer.generate(
        OVERLAY_PROMPT.format(text=text, style=style or DEFAULT_OVERLAY_STYLE)
    )
    image_url = await image_model.generate(
        f'{overlay_prompt}. The text "{text}" must be clearly visible and legible in the image.',
        aspect_ratio="1:1",
    )
    return {"imageUrl": image_url}
