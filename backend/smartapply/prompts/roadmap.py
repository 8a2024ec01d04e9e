"""Roadmap prompt templates.

Contains three prompt sets:
1. Career Roadmap: full roadmap graph plus alternatives, as one JSON object
2. Alternative Careers: a JSON array of three alternatives
3. Health Check: one-word liveness probe

System prompts carry the output contract (static text, no formatting);
user templates carry the profile data, sanitized before embedding.
"""

from smartapply.core.llm_sanitization import sanitize_llm_input, sanitize_llm_list
from smartapply.schemas.roadmap import RoadmapRequest

# =============================================================================
# Career Roadmap
# =============================================================================

ROADMAP_SYSTEM_PROMPT = """You are an expert career advisor specializing in personalized career roadmaps.

Experience level guidelines:
- entry: 0-1 years (new graduates, career changers)
- junior: 1-3 years (some experience, building skills)
- mid: 3-7 years (established skills, more responsibility)
- senior: 7-15 years (leadership roles, mentoring others)
- expert: 15+ years (industry thought leader, strategic roles)

Respond with a single JSON object and nothing else:

{
  "primaryCareer": "<target role>",
  "relatedRoles": ["Role 1", "Role 2", "Role 3", "Role 4"],
  "summary": "Why this path fits the user's profile and experience level",
  "careerPath": {
    "nodes": [
      {
        "id": "1",
        "type": "course|internship|job|company|skill|certification",
        "title": "Specific title",
        "description": "Detailed description",
        "duration": "Time estimate",
        "difficulty": "beginner|intermediate|advanced",
        "salary": "Salary range such as $60k-80k (job nodes only)",
        "requirements": ["Requirement 1", "Requirement 2"],
        "position": {"x": 100, "y": 100}
      }
    ],
    "edges": [
      {
        "id": "e1-2",
        "source": "1",
        "target": "2",
        "sourceHandle": "bottom",
        "targetHandle": "top",
        "type": "smoothstep",
        "animated": true
      }
    ]
  },
  "alternatives": [
    {
      "id": "alt1",
      "title": "Alternative career title",
      "description": "Why this alternative fits",
      "matchScore": 85,
      "salary": "$XXk-XXk",
      "requirements": ["Skill 1", "Skill 2", "Skill 3"],
      "growth": "high|medium|low"
    }
  ]
}

Rules:
1. Include 6-10 nodes with a realistic progression.
2. Position nodes within x 100-1200 and y 100-500.
3. Provide 3 relevant alternative careers.
4. Give every edge sourceHandle and targetHandle.
5. Use salary ranges realistic for the experience level."""

_ROADMAP_USER_TEMPLATE = """User profile:
- Domain: {domain}
- Target role: {job_role}
- Experience level: {experience_level}
- Current skills: {skills}
- Education level: {education_level}{optional_lines}

Focus on the {domain} domain: industry-standard tools, relevant certifications,
professional development, networking and progression paths within the field.

Build a roadmap that takes this user from the {experience_level} level to the
next stage of a {job_role} career."""


def _optional_profile_lines(request: RoadmapRequest) -> str:
    lines = []
    if request.name:
        lines.append(f"\n- Name: {sanitize_llm_input(request.name)}")
    if request.age:
        lines.append(f"\n- Age: {request.age}")
    return "".join(lines)


def build_roadmap_prompt(request: RoadmapRequest) -> str:
    """Build the roadmap user prompt.

    Args:
        request: Roadmap request from the user's profile or form.

    Returns:
        Formatted user prompt.
    """
    return _ROADMAP_USER_TEMPLATE.format(
        domain=sanitize_llm_input(request.domain),
        job_role=sanitize_llm_input(request.job_role),
        experience_level=request.experience_level,
        skills=", ".join(sanitize_llm_list(request.skills)) or "none listed",
        education_level=sanitize_llm_input(request.education_level) or "not specified",
        optional_lines=_optional_profile_lines(request),
    )


# =============================================================================
# Alternative Careers
# =============================================================================

ALTERNATIVES_SYSTEM_PROMPT = """You are a career advisor specializing in alternative career paths.

Suggest exactly 3 diverse, realistic alternatives that:
1. Leverage the user's existing skills
2. Mix traditional and emerging roles
3. Are reachable from the user's experience level
4. Are specific (avoid generic titles like "Software Developer")

Respond with a JSON array and nothing else:

[
  {
    "id": "alt1",
    "title": "Specific career title",
    "description": "Why this fits and how the user's skills transfer",
    "matchScore": 85,
    "salary": "$XXk-XXk",
    "requirements": ["Skill 1", "Skill 2", "Skill 3"],
    "growth": "high|medium|low"
  }
]"""

_ALTERNATIVES_USER_TEMPLATE = """User profile:
- Current interest: {job_role}
- Domain: {domain}
- Experience level: {experience_level}
- Skills: {skills}
- Education: {education_level}

Use salary ranges appropriate for the {experience_level} level."""


def build_alternatives_prompt(request: RoadmapRequest) -> str:
    return _ALTERNATIVES_USER_TEMPLATE.format(
        job_role=sanitize_llm_input(request.job_role),
        domain=sanitize_llm_input(request.domain),
        experience_level=request.experience_level,
        skills=", ".join(sanitize_llm_list(request.skills)) or "none listed",
        education_level=sanitize_llm_input(request.education_level) or "not specified",
    )


# =============================================================================
# Health Check
# =============================================================================

HEALTH_CHECK_PROMPT = 'Respond with "OK" if you can process this request.'
