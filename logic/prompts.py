"""Centralised prompts and guardrails for the Gemini-backed adapters."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from models.taxonomy import CATEGORIES, OCCASIONS, SEASONS, STYLES

GUARDRAIL_BULLETS: List[str] = [
    "Stay within the wardrobe scope (garments, outfits, materials, weather).",
    "Only reference wardrobe item ids that appear in the supplied wardrobe.",
    "Keep sustainability scores as integers between 0 and 100.",
    "Return a single JSON object and nothing else: no markdown, no commentary.",
]


def system_instruction(role_hint: str) -> str:
    """Compose a consistent preamble with boundary reminders."""

    boundary_text = "\n".join(f"- {bullet}" for bullet in GUARDRAIL_BULLETS)
    return (
        f"You are the EcoWardrobe {role_hint}.\n"
        "Follow these guardrails before responding:\n"
        f"{boundary_text}\n"
    )


def _one_of(values: List[str]) -> str:
    return f"ONLY ONE OF [{', '.join(values)}]"


def clothing_analysis_prompt() -> str:
    return (
        system_instruction("garment analyst")
        + "Analyze this clothing item and return a JSON object with these EXACT fields:\n"
        f"- category: {_one_of(CATEGORIES)}\n"
        "- type: specific name (e.g., t-shirt, jeans, sweater)\n"
        "- color: primary color name\n"
        "- material: primary material name\n"
        f"- style: {_one_of(STYLES)}\n"
        f"- occasion: {_one_of([o for o in OCCASIONS if o != 'travel'])}\n"
        f"- season: {_one_of(SEASONS)}\n"
        "- sustainabilityScore: number between 0-100\n"
        "Use exactly one value for each field from the allowed options where specified."
    )


def outfit_recommendation_prompt(
    wardrobe: List[Dict[str, Any]], weather: Dict[str, Any], occasion: str, count: int = 3
) -> str:
    return (
        system_instruction("outfit stylist")
        + f"Create {count} outfit recommendations based on the following.\n"
        f"Wardrobe items: {json.dumps(wardrobe, default=str)}\n"
        f"Weather: {json.dumps(weather, default=str)}\n"
        f"Occasion: {occasion}\n"
        "For each outfit include a name, the list of item ids to wear together, a sustainability score, "
        "a suitable season and a rationale. Respond with:\n"
        '{"outfits": [{"name": "Outfit Name", "items": [1, 2, 3], "sustainabilityScore": 85, '
        '"season": "fall", "rationale": "Why these items work together"}]}'
    )


def material_sustainability_prompt(material: str) -> str:
    return (
        system_instruction("sustainability advisor")
        + f"Analyze the sustainability of clothing made from {material}. Provide a sustainability score "
        "from 0-100, a brief explanation, and 3 tips for sustainable care or alternatives. "
        'Respond with {"score": 70, "explanation": "...", "tips": ["...", "...", "..."]}.'
    )


__all__ = [
    "GUARDRAIL_BULLETS",
    "system_instruction",
    "clothing_analysis_prompt",
    "outfit_recommendation_prompt",
    "material_sustainability_prompt",
]
