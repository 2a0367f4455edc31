"""
Role presets for the Role component and Prompt defaults.
"""

from types import MappingProxyType

from attrs import frozen


@frozen
class RolePreset:
    name: str
    title: str
    expertise: tuple[str, ...]
    traits: tuple[str, ...] = ()
    experience_level: str | None = None
    style: str = "professional"


EXPERIENCE_PREFIXES = MappingProxyType(
    {
        "junior": "a junior ",
        "mid": "a ",
        "senior": "a senior ",
        "expert": "an expert ",
        "principal": "a principal ",
    }
)


def _roles(*presets: RolePreset) -> MappingProxyType:
    return MappingProxyType({preset.name: preset for preset in presets})


ROLE_PRESETS = _roles(
    # Support
    RolePreset("assistant", "Assistant", ("general help",), style="friendly"),
    RolePreset(
        "support",
        "Support Agent",
        ("customer support",),
        traits=("patient", "helpful"),
        style="friendly",
    ),
    RolePreset("advisor", "Advisor", ("expert advice",)),
    RolePreset("guide", "Guide", ("navigation", "explanation"), style="friendly"),
    RolePreset("concierge", "Concierge", ("personalized service",), style="friendly"),
    # Technical
    RolePreset(
        "engineer",
        "Software Engineer",
        ("software development", "programming", "system design"),
        traits=("analytical", "detail-oriented", "problem-solver"),
        experience_level="senior",
    ),
    RolePreset(
        "developer",
        "Software Developer",
        ("application development",),
        experience_level="senior",
    ),
    RolePreset(
        "architect", "Software Architect", ("system design",), experience_level="senior"
    ),
    RolePreset(
        "devops",
        "DevOps Engineer",
        ("CI/CD", "infrastructure"),
        experience_level="senior",
    ),
    RolePreset("security", "Security Specialist", ("cybersecurity",)),
    RolePreset("data-scientist", "Data Scientist", ("analytics", "ML")),
    RolePreset(
        "frontend", "Frontend Developer", ("UI development",), experience_level="senior"
    ),
    RolePreset(
        "backend",
        "Backend Developer",
        ("server-side development",),
        experience_level="senior",
    ),
    RolePreset("qa-engineer", "QA Engineer", ("testing", "quality")),
    # Creative
    RolePreset(
        "writer",
        "Writer",
        ("content creation", "storytelling", "communication"),
        traits=("creative", "articulate", "thoughtful"),
        experience_level="expert",
    ),
    RolePreset("copywriter", "Copywriter", ("marketing copy",)),
    RolePreset("editor", "Editor", ("content editing",)),
    RolePreset("journalist", "Journalist", ("news", "reporting")),
    # Business
    RolePreset("analyst", "Business Analyst", ("analysis", "requirements")),
    RolePreset("consultant", "Consultant", ("advisory",)),
    RolePreset("marketer", "Marketing Specialist", ("marketing strategy",)),
    RolePreset("pm", "Product Manager", ("product strategy",)),
    RolePreset("strategist", "Strategist", ("business strategy",)),
    # Education
    RolePreset("teacher", "Teacher", ("education",), style="friendly"),
    RolePreset("tutor", "Tutor", ("one-on-one instruction",), style="friendly"),
    RolePreset("mentor", "Mentor", ("guidance",), style="friendly"),
    RolePreset("coach", "Coach", ("performance coaching",), style="friendly"),
    RolePreset("professor", "Professor", ("academic expertise",), style="academic"),
    # Domain experts
    RolePreset("legal", "Legal Expert", ("law", "compliance")),
    RolePreset("medical", "Medical Professional", ("healthcare",)),
    RolePreset("designer", "Designer", ("design",)),
    RolePreset("scientist", "Scientist", ("scientific research",), style="academic"),
    RolePreset("translator", "Translator", ("language translation",)),
)
