"""
Skill Extraction Prompts

Prompt templates for the AI extraction client. Extraction prompts ask for a
bare JSON array; gap analysis and recommendations ask for a single JSON object.
"""

from typing import List, Optional

from src.common.skill_types import SkillCategory

# Categories the model may use ("other" is a parser fallback, not offered)
PROMPT_CATEGORIES = ", ".join(
    f'"{c.value}"' for c in SkillCategory if c is not SkillCategory.OTHER
)

SKILL_FIELDS_BLOCK = f"""For each skill found, create an object with:
- name: The specific skill name (e.g., "Python", "React", "Project Management")
- category: Must be one of: {PROMPT_CATEGORIES}
- proficiency: Estimate based on context: "beginner", "intermediate", "advanced", or "expert"
- evidence: A brief quote from the {{source_noun}} showing this skill (max 100 chars)
- confidence: A score from 0.0 to 1.0 (how confident you are this is a real skill)"""


TEXT_EXTRACTION_TEMPLATE = """You are an expert career analyst and skill extractor. Analyze the following professional text and extract all technical and professional skills.

IMPORTANT: Return ONLY a JSON array. No explanations, no markdown, no additional text. Just the raw JSON array.

{fields}

Example format (return ONLY this format, nothing else):
[
  {{
    "name": "Python",
    "category": "programming_language",
    "proficiency": "advanced",
    "evidence": "Developed scalable applications using Python",
    "confidence": 0.95
  }}
]

Text to analyze:
{text}

Extract ALL skills you can find. Return the JSON array now:"""


DOCUMENT_EXTRACTION_PROMPT = """You are an expert career analyst. Extract all technical and professional skills from the attached CV/Resume document.

IMPORTANT: Return ONLY a JSON array. No explanations, no markdown, no additional text. Just the raw JSON array.

{fields}

Example format (return ONLY this format, nothing else):
[
  {{
    "name": "Python",
    "category": "programming_language",
    "proficiency": "advanced",
    "evidence": "5 years Python development",
    "confidence": 0.95
  }},
  {{
    "name": "Leadership",
    "category": "soft_skill",
    "proficiency": "expert",
    "evidence": "Led team of 10 developers",
    "confidence": 0.9
  }}
]

Extract ALL skills you can find. Return the JSON array now:""".format(
    fields=SKILL_FIELDS_BLOCK.format(source_noun="document")
)


SKILL_GAP_TEMPLATE = """You are a career development expert. Analyze skill gaps for someone targeting this role.

Target Role: {target_role}
Current Skills: {current_skills}

Provide a comprehensive skill gap analysis including:
1. Missing critical skills
2. Skills that need improvement
3. Priority levels (critical, high, medium, low)
4. Estimated time to acquire each skill
5. Recommended learning resources

Return ONLY a valid JSON object with this structure:
{{
  "gaps": [
    {{
      "skill": "skill name",
      "category": "programming_language|framework|tool|soft_skill|domain_knowledge",
      "currentLevel": "none|beginner|intermediate|advanced|expert",
      "requiredLevel": "beginner|intermediate|advanced|expert",
      "priority": "critical|high|medium|low",
      "timeToAcquire": "e.g., 2-3 months",
      "resources": ["resource 1", "resource 2"]
    }}
  ],
  "summary": "overall assessment summary in 2-3 sentences"
}}

Return JSON only, no markdown formatting."""


RECOMMENDATION_TEMPLATE = """You are a career development advisor. Based on these current skills, recommend complementary skills to learn next.

Current Skills: {current_skills}
{target_role_line}

Recommend 5-10 high-value skills that would complement the current skill set.

Return ONLY a valid JSON object:
{{
  "recommendations": [
    {{
      "skill": "skill name",
      "reason": "why this skill complements current skills",
      "relevance": 0.95,
      "demandScore": 0.9,
      "difficulty": "beginner|intermediate|advanced",
      "estimatedLearningTime": "e.g., 2-3 months"
    }}
  ],
  "summary": "overall recommendation strategy in 2-3 sentences"
}}

Return JSON only, no markdown formatting."""


def build_text_extraction_prompt(text: str) -> str:
    return TEXT_EXTRACTION_TEMPLATE.format(
        fields=SKILL_FIELDS_BLOCK.format(source_noun="text"),
        text=text,
    )


def build_skill_gap_prompt(current_skills: List[str], target_role: str) -> str:
    return SKILL_GAP_TEMPLATE.format(
        target_role=target_role,
        current_skills=", ".join(current_skills),
    )


def build_recommendation_prompt(current_skills: List[str], target_role: Optional[str] = None) -> str:
    return RECOMMENDATION_TEMPLATE.format(
        current_skills=", ".join(current_skills),
        target_role_line=f"Target Role: {target_role}" if target_role else "",
    )
