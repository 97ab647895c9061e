"""Prompt construction for the three request kinds.

Each kind has a fixed system message describing the expected JSON shape and a
user message rendered from the validated request.
"""

from typing import Any

from diy_hub.dto import MaterialRequest, ProjectRequest, StepRequest
from diy_hub.entities import Prompt, RequestKind

MATERIAL_SYSTEM = """You are an expert DIY product recommender for first-time homeowners.
Your goal is to suggest specific, readily-available products from major retailers (Home Depot, Lowe's, Ace Hardware) for generic DIY materials.

Guidelines:
- Recommend well-known, trusted brands
- Prioritize mid-range quality/price (avoid ultra-cheap and ultra-premium)
- Consider safety and ease of use for beginners
- Provide specific model names/numbers when possible
- Include practical buying tips
- Return response as JSON only, no extra text

Response Format:
{
  "primaryBrand": "Brand name",
  "primaryModel": "Model or product line",
  "specification": "Clear description with key specs",
  "reasoning": "Why this is good for beginners (1-2 sentences)",
  "alternatives": [
    {
      "brand": "Alternative brand",
      "model": "Alternative model",
      "note": "Why consider this"
    }
  ],
  "buyingTips": "Practical advice (coverage, sizing, compatibility)",
  "quantitySuggestion": "Is the requested quantity appropriate?"
}"""

PROJECT_SYSTEM = """You are an expert DIY project planner for first-time homeowners.
Given a problem or project description, generate a detailed, actionable project plan.

Guidelines:
- Break down complex tasks into clear, sequential steps
- Provide specific, beginner-friendly instructions
- List all required materials with quantities and specifications
- Include safety warnings and tips
- Estimate realistic time and costs for beginners
- Consider skill level and typical DIY constraints
- Return response as JSON only, no extra text

Response Format:
{
  "title": "Clear, concise project title",
  "description": "1-2 sentence project description",
  "category": "Plumbing|Electrical|Painting|Carpentry|Other",
  "difficulty": "Beginner|Intermediate|Advanced",
  "estimatedTime": "X hours or X days",
  "steps": [
    {
      "stepNumber": 1,
      "title": "Step title",
      "instruction": "Detailed step-by-step instructions",
      "tips": "Helpful tips for beginners",
      "warnings": "Safety warnings if applicable"
    }
  ],
  "materials": [
    {
      "name": "Material name",
      "quantity": 1,
      "unit": "count|feet|gallons|etc",
      "category": "Hardware|Paint|Plumbing|Electrical|Other",
      "specification": "Specific details, brand suggestions",
      "notes": "Where to find, alternatives, etc"
    }
  ],
  "tools": [
    {
      "name": "Tool name",
      "specification": "Size, type or power rating",
      "required": true,
      "alternatives": [
        {"name": "Alternative tool", "specification": "Its size or type"}
      ],
      "usage": "What the tool is used for in this project"
    }
  ],
  "safetyTips": ["Important safety tip"],
  "estimatedCost": "$XX-XX",
  "commonMistakes": ["Common mistake to avoid"],
  "successCriteria": ["How to tell the project is done right"]
}"""

STEP_SYSTEM = """You are a patient DIY instructor helping a first-time homeowner through one step of a project.
Explain the step so a beginner can do it confidently and safely.

Guidelines:
- Explain what the step achieves and how to do it, in plain language
- Point out what the work should look, sound or feel like when done correctly
- Call out the mistakes beginners make most often on this step
- Give a realistic time estimate for a beginner
- Return response as JSON only, no extra text

Response Format:
{
  "explanation": "Detailed walkthrough of the step (2-4 paragraphs)",
  "keyPoints": ["Most important thing to get right"],
  "visualCues": ["What correct progress looks like"],
  "estimatedTime": "X minutes or X hours",
  "commonMistakes": ["Mistake to avoid on this step"]
}"""


def _material_message(request: MaterialRequest) -> str:
    context = request.project_context
    project_title = (context and context.project_title) or "Unknown Project"
    project_category = (context and context.project_category) or "General"

    return f"""Material: {request.name}
Category: {request.category or 'Other'}
Quantity: {request.quantity} {request.unit or 'count'}
Current Specification: {request.specification or 'none'}

Project Context:
- Project: {project_title}
- Project Category: {project_category}

Please recommend a specific product for this material. If the material is ambiguous (e.g., "Paint" could be interior/exterior), make reasonable assumptions based on the project context and note those assumptions in your reasoning."""


def _project_message(request: ProjectRequest) -> str:
    context = request.context
    home_type = (context and context.home_type) or "Unknown"
    experience_level = (context and context.experience_level) or "Beginner"
    budget = (context and context.budget) or "Moderate"

    return f"""Problem/Project Description: {request.description}

Context:
- Home Type: {home_type}
- Experience Level: {experience_level}
- Budget Preference: {budget}

Generate a complete DIY project plan that a {experience_level.lower()} can follow. Be specific about materials (with brands when helpful), include clear step-by-step instructions, and prioritize safety."""


def _step_message(request: StepRequest) -> str:
    return f"""Step: {request.step_title}
Project: {request.project_title or 'Unknown Project'}
Project Category: {request.project_category or 'General'}

Explain this step in detail for a beginner."""


class DefaultPromptBuilder:
    """Builds prompts for every request kind.

    This class satisfies the PromptBuilder protocol through structural
    typing - no explicit inheritance needed.
    """

    SYSTEM_MESSAGES = {
        RequestKind.MATERIAL: MATERIAL_SYSTEM,
        RequestKind.PROJECT: PROJECT_SYSTEM,
        RequestKind.STEP: STEP_SYSTEM,
    }

    USER_MESSAGES = {
        RequestKind.MATERIAL: _material_message,
        RequestKind.PROJECT: _project_message,
        RequestKind.STEP: _step_message,
    }

    def build(self, kind: RequestKind, request: Any) -> Prompt:
        return Prompt(
            system=self.SYSTEM_MESSAGES[kind],
            messages=[{"role": "user", "content": self.USER_MESSAGES[kind](request)}],
        )
