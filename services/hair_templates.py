"""Fixed hairstyle templates used for inpainting (prompt + LoRA weights)"""

from typing import Dict, List
from pydantic import BaseModel

from core.exceptions import HairTemplateNotFoundException


class HairTemplate(BaseModel):
    """A hairstyle the inpainting model can paint"""
    id: str
    name: str
    trigger_word: str
    lora_path: str
    color: str
    icon: str = ""
    image: str
    prompt: str


HAIR_TEMPLATES: List[HairTemplate] = [
    HairTemplate(
        id="curly",
        name="Natural Curly Waves",
        trigger_word="BlackCurly",
        lora_path="https://v3.fal.media/files/penguin/oE9LhKKMITakN2OPOPu8A_pytorch_lora_weights.safetensors",
        color="#8B4513",
        image="/images/blackCurl.png",
        prompt="make the hairstyle of uploaded image exactly like BlackCurly with black color hair",
    ),
    HairTemplate(
        id="long-marron",
        name="Elegant Long Brunette",
        trigger_word="brownHair",
        lora_path="https://v3.fal.media/files/kangaroo/sQ_L7ymUU6OeIgyQFXqCV_pytorch_lora_weights.safetensors",
        color="#A0522D",
        icon="💇",
        image="/images/LongMaroon.png",
        prompt="make the hairstyle of uploaded image exactly like brownHair with maroon brown color hair",
    ),
    HairTemplate(
        id="streak",
        name="Cream Blonde Highlights",
        trigger_word="CreamStreakBlack",
        lora_path="https://v3.fal.media/files/panda/2Mq3BEPVV43vBwUGrtLv-_pytorch_lora_weights.safetensors",
        color="#F5DEB3",
        image="/images/CreamStreak.png",
        prompt=(
            "make the hairstyle of uploaded image exactly like creamStreakHair "
            "with black color hair and cream blonde streaks"
        ),
    ),
]

_TEMPLATES_BY_ID: Dict[str, HairTemplate] = {t.id: t for t in HAIR_TEMPLATES}


def list_templates() -> List[HairTemplate]:
    return list(HAIR_TEMPLATES)


def get_template(template_id: str) -> HairTemplate:
    """
    Look up a template by id

    Raises:
        HairTemplateNotFoundException: unknown id
    """
    template = _TEMPLATES_BY_ID.get(template_id)
    if template is None:
        raise HairTemplateNotFoundException(template_id)
    return template
