"""Offline fallback roadmaps.

When Gemini is unavailable (not configured, or every retry failed) the
roadmap service builds a result from the static tables in this module.
Output is deterministic for a given request apart from the id timestamp.

Table lookup order:
1. Exact job role key (lowercased)
2. Exact domain key (lowercased)
3. Ordered job-role keyword rules, most specific first
4. Generic containment / shared-word match against table keys
5. ``default``
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog

from smartapply.schemas.roadmap import (
    AlternativeCareer,
    CareerPath,
    CareerRecommendation,
    JobMarketInfo,
    LearningPath,
    RoadmapRequest,
    SalaryRange,
    Skill,
)

logger = structlog.get_logger()

FALLBACK_MARKER = "[Fallback]"
DEFAULT_TABLE_KEY = "default"

# =============================================================================
# Node / Edge Helpers
# =============================================================================

_ROW_Y = (100, 300)
_X_START = 100
_X_STEP = 200


def _course(title: str, description: str, duration: str, difficulty: str) -> dict[str, Any]:
    return {
        "type": "course",
        "title": title,
        "description": description,
        "duration": duration,
        "difficulty": difficulty,
    }


def _internship(title: str, description: str, duration: str) -> dict[str, Any]:
    return {"type": "internship", "title": title, "description": description, "duration": duration}


def _job(title: str, description: str, salary: str) -> dict[str, Any]:
    return {"type": "job", "title": title, "description": description, "salary": salary}


def _skill(title: str, description: str) -> dict[str, Any]:
    return {"type": "skill", "title": title, "description": description}


def _cert(title: str, description: str) -> dict[str, Any]:
    return {"type": "certification", "title": title, "description": description}


def _path(
    main: list[dict[str, Any]],
    side: tuple[dict[str, Any], ...] = (),
    branches: tuple[tuple[int, int], ...] = (),
    handles: bool = False,
) -> dict[str, Any]:
    """Lay out a career path graph.

    Main-track nodes sit on the first row and are chained with animated
    edges; side nodes sit on the second row. ``branches`` adds plain edges
    between node numbers (1-based).
    """
    nodes: list[dict[str, Any]] = []
    for row, specs in enumerate((main, side)):
        for column, spec in enumerate(specs):
            nodes.append(
                {
                    **spec,
                    "id": str(len(nodes) + 1),
                    "position": {"x": _X_START + _X_STEP * column, "y": _ROW_Y[row]},
                }
            )

    edges: list[dict[str, Any]] = []
    for source in range(1, len(main)):
        edge: dict[str, Any] = {
            "id": f"e{source}-{source + 1}",
            "source": str(source),
            "target": str(source + 1),
            "type": "smoothstep",
            "animated": True,
        }
        if handles:
            edge.update(sourceHandle="bottom", targetHandle="top")
        edges.append(edge)
    for source, target in branches:
        edges.append(
            {
                "id": f"e{source}-{target}",
                "source": str(source),
                "target": str(target),
                "type": "smoothstep",
            }
        )
    return {"nodes": nodes, "edges": edges}


def _alts(*rows: tuple[Any, ...]) -> tuple[dict[str, Any], ...]:
    """Build alternative career dicts from (title, description, score, salary, requirements, growth[, level])."""
    result = []
    for index, row in enumerate(rows, start=1):
        title, description, score, salary, requirements, growth, *rest = row
        alt = {
            "id": f"alt{index}",
            "title": title,
            "description": description,
            "matchScore": score,
            "salary": salary,
            "requirements": list(requirements),
            "growth": growth,
        }
        if rest:
            alt["experienceLevel"] = rest[0]
        result.append(alt)
    return tuple(result)


# =============================================================================
# Career Paths
# =============================================================================

_TECH_PATH = _path(
    [
        _course("Programming Fundamentals", "Learn basic programming concepts", "3 months", "beginner"),
        _internship("Tech Internship", "Gain practical experience", "6 months"),
        _job("Junior Developer", "Entry-level development role", "$60k-80k"),
    ],
    handles=True,
)

_BUSINESS_PATH = _path(
    [
        _course("Business Fundamentals", "Learn core business concepts", "2 months", "beginner"),
        _internship("Business Internship", "Gain business experience", "4 months"),
        _job("Business Analyst", "Analyze business processes", "$55k-75k"),
    ],
    handles=True,
)

_GENERIC_PATH = _path(
    [
        _course("Foundation Skills", "Build core competencies in your field", "3-6 months", "beginner"),
        _course("Advanced Training", "Develop specialized expertise", "4-8 months", "intermediate"),
        _internship("Professional Experience", "Gain hands-on industry experience", "6-12 months"),
        _job("Entry Level Position", "Begin your professional career", "$40k-60k"),
        _job("Mid-Level Professional", "Advance in your career with experience", "$60k-90k"),
    ],
    side=(
        _skill("Core Skills", "Essential competencies for your field"),
        _cert("Professional Certification", "Industry-recognized credentials"),
        _skill("Leadership Skills", "Team management and communication"),
    ),
    branches=((1, 6), (2, 7)),
)

_DATA_SCIENCE_PATH = _path(
    [
        _course(
            "Python & Statistics Fundamentals",
            "Learn Python programming and statistical analysis",
            "3 months",
            "beginner",
        ),
        _course("Machine Learning & AI", "Master ML algorithms and deep learning", "4 months", "intermediate"),
        _course("Big Data & Cloud Computing", "Learn Spark, Hadoop, AWS/Azure", "3 months", "intermediate"),
        _internship("Data Science Internship", "Real-world data projects", "6 months"),
        _job("Junior Data Scientist", "Entry-level data science role", "$70k-95k"),
        _job("Senior Data Scientist", "Lead data science projects", "$110k-150k"),
    ],
    side=(
        _skill("Python, SQL, R", "Programming languages"),
        _skill("TensorFlow, PyTorch", "ML frameworks"),
        _cert("Google Data Analytics Certificate", "Industry certification"),
    ),
)

_STARTUP_PATH = _path(
    [
        _course("Entrepreneurship Fundamentals", "Y Combinator Startup School", "4 weeks", "beginner"),
        _course("Product Development & MVP", "Build and validate your product", "3 months", "intermediate"),
        _internship("Startup Accelerator", "Join accelerator program", "3-6 months"),
        _job("Founder & CEO", "Launch your startup", "Equity-based"),
    ],
    side=(
        _skill("Business Strategy", "Develop business model"),
        _cert("MBA or Business Degree", "Formal business education"),
    ),
)

_MOTION_GRAPHICS_PATH = _path(
    [
        _course("After Effects Fundamentals", "Master motion graphics essentials", "3 months", "beginner"),
        _course("Cinema 4D & 3D Animation", "Learn 3D motion design", "4 months", "intermediate"),
        _internship("Motion Design Intern", "Work with creative agency", "6 months"),
        _job("Junior Motion Graphics Artist", "Create animations and visual effects", "$45k-65k"),
        _job("Senior Motion Designer", "Lead creative projects", "$70k-100k"),
    ],
    side=(
        _skill("Visual Design", "Composition and aesthetics"),
        _cert("Adobe Certified Professional", "Industry certification"),
    ),
)

_CYBERSECURITY_PATH = _path(
    [
        _course(
            "Networking & Linux Fundamentals",
            "Learn networking basics and Linux command line",
            "3 months",
            "beginner",
        ),
        _course("Ethical Hacking & Pentesting", "Master penetration testing techniques", "4 months", "intermediate"),
        _cert("CEH or OSCP Certification", "Industry-recognized security certifications"),
        _internship("Security Analyst Intern", "Gain hands-on security experience", "6 months"),
        _job("Junior Penetration Tester", "Entry-level pentesting role", "$60k-80k"),
        _job("Senior Security Engineer", "Lead security assessments", "$100k-140k"),
    ],
    side=(
        _skill("Kali Linux & Tools", "Nmap, Metasploit, Burp Suite"),
        _skill("Web Security", "OWASP Top 10, SQL Injection"),
    ),
)

_DESIGN_PATH = _path(
    [
        _course("Graphic Design Fundamentals", "Learn design principles", "3 months", "beginner"),
        _course("UI/UX Design", "User interface and experience", "4 months", "intermediate"),
        _internship("Design Intern", "Agency or in-house role", "6 months"),
        _job("Junior Designer", "Create visual content", "$45k-65k"),
        _job("Senior Designer", "Lead design projects", "$70k-100k"),
    ],
    side=(_skill("Adobe Creative Suite", "Master design tools"),),
)

_CONSTRUCTION_PATH = _path(
    [
        _course("Construction Management Basics", "Learn construction fundamentals", "3 months", "beginner"),
        _cert("OSHA Safety Certification", "Construction safety training"),
        _internship("Construction Site Intern", "On-site experience", "6 months"),
        _job("Assistant Project Manager", "Support construction projects", "$45k-65k"),
        _job("Construction Manager", "Lead construction projects", "$70k-100k"),
    ]
)

_SURVEYOR_PATH = _path(
    [
        _course(
            "Surveying Fundamentals",
            "Learn surveying principles and mathematics",
            "4 months",
            "intermediate",
        ),
        _course("GIS & CAD Training", "Master surveying software tools", "3 months", "intermediate"),
        _cert("Land Surveyor License", "Professional surveyor certification"),
        _internship("Surveying Assistant", "Field surveying experience", "6 months"),
        _job("Licensed Land Surveyor", "Lead surveying projects", "$55k-80k"),
        _job("Senior Surveyor / Survey Manager", "Manage surveying operations", "$75k-110k"),
    ]
)

_HEALTHCARE_PATH = _path(
    [
        _course("Healthcare Fundamentals", "Medical basics and terminology", "4 months", "beginner"),
        _cert("Nursing or Medical Degree", "Professional healthcare credential"),
        _internship("Clinical Rotation", "Hospital experience", "12 months"),
        _job("Registered Nurse / Medical Assistant", "Entry healthcare role", "$50k-70k"),
        _job("Senior Healthcare Professional", "Advanced medical role", "$80k-120k"),
    ]
)

_EDUCATION_PATH = _path(
    [
        _course("Education Degree", "Bachelor's in Education", "4 years", "intermediate"),
        _cert("Teaching License", "State teaching credential"),
        _internship("Student Teaching", "Classroom experience", "6 months"),
        _job("Classroom Teacher", "Teach students", "$40k-60k"),
        _job("Department Head / Professor", "Lead education programs", "$65k-95k"),
    ]
)

_LEGAL_PATH = _path(
    [
        _course("Law Degree (JD)", "Juris Doctor degree", "3 years", "advanced"),
        _cert("Bar Exam", "State bar certification"),
        _internship("Legal Internship", "Law firm experience", "1 year"),
        _job("Associate Attorney", "Entry-level lawyer", "$60k-100k"),
        _job("Partner / Senior Attorney", "Lead legal practice", "$120k-200k"),
    ]
)

_FINANCE_PATH = _path(
    [
        _course("Finance or Accounting Degree", "Bachelor's in Finance", "4 years", "intermediate"),
        _cert("CPA or CFA", "Professional certification"),
        _internship("Finance Internship", "Financial institution experience", "6 months"),
        _job("Financial Analyst", "Analyze financial data", "$55k-80k"),
        _job("Senior Financial Manager", "Lead finance teams", "$90k-140k"),
    ]
)

_ENGINEERING_PATH = _path(
    [
        _course("Engineering Degree", "Bachelor's in Engineering", "4 years", "advanced"),
        _cert("PE License", "Professional Engineer license"),
        _internship("Engineering Internship", "Hands-on engineering work", "6 months"),
        _job("Junior Engineer", "Entry-level engineering role", "$60k-80k"),
        _job("Senior Engineer / Project Lead", "Lead engineering projects", "$90k-130k"),
    ]
)

_CLIMATE_PATH = _path(
    [
        _course(
            "Environmental Science Degree",
            "Bachelor's in Environmental Science",
            "4 years",
            "intermediate",
        ),
        _course("Climate Modeling", "Master climate research methods", "2 years", "advanced"),
        _internship("Research Assistant", "Work in climate research lab", "6-12 months"),
        _job("Climate Scientist", "Research climate patterns", "$60k-100k"),
    ],
    side=(
        _cert("PhD in Climate Science", "Advanced research degree"),
        _skill("Data Science", "Analyze climate data"),
    ),
)

# =============================================================================
# Alternatives
# =============================================================================

_TECH_ALTERNATIVES = _alts(
    ("Data Analyst", "Analyze data to drive business decisions", 80, "$65k-95k",
     ("SQL", "Python", "Statistics"), "high"),
    ("UX Designer", "Design user-friendly interfaces", 75, "$70k-100k",
     ("Design Tools", "User Research", "Prototyping"), "medium"),
    ("Product Manager", "Manage product development lifecycle", 70, "$80k-120k",
     ("Product Strategy", "Communication", "Analytics"), "high"),
)  # fmt: skip

_BUSINESS_ALTERNATIVES = _alts(
    ("Marketing Specialist", "Develop and execute marketing strategies", 75, "$50k-80k",
     ("Marketing", "Communication", "Analytics"), "medium"),
    ("Operations Manager", "Optimize business operations", 80, "$70k-100k",
     ("Operations", "Leadership", "Process Improvement"), "medium"),
    ("Financial Analyst", "Analyze financial data and trends", 70, "$60k-90k",
     ("Finance", "Excel", "Data Analysis"), "medium"),
)  # fmt: skip

_GENERIC_ALTERNATIVES = _alts(
    ("Project Coordinator", "Manage projects and coordinate team activities", 75, "$45k-70k",
     ("Project Management", "Communication", "Organization"), "medium"),
    ("Operations Specialist", "Optimize processes and improve efficiency", 72, "$50k-75k",
     ("Operations", "Analysis", "Process Improvement"), "medium"),
    ("Consultant", "Provide expert advice in your field", 70, "$60k-100k",
     ("Expertise", "Communication", "Problem Solving"), "high"),
)  # fmt: skip

_DATA_SCIENCE_ALTERNATIVES = _alts(
    ("Machine Learning Engineer", "Build and deploy ML models", 92, "$100k-150k",
     ("Python", "TensorFlow", "ML Algorithms"), "high"),
    ("Data Analyst", "Analyze data and create insights", 88, "$65k-90k",
     ("SQL", "Python", "Statistics", "Tableau"), "high"),
    ("AI Engineer", "Develop AI systems and applications", 90, "$110k-160k",
     ("Deep Learning", "NLP", "Computer Vision"), "high"),
    ("Business Intelligence Analyst", "Create data dashboards and reports", 80, "$70k-100k",
     ("SQL", "Power BI", "Business Analysis"), "medium"),
)  # fmt: skip

_STARTUP_ALTERNATIVES = _alts(
    ("Product Manager", "Lead product development", 85, "$90k-150k",
     ("Product Strategy", "Leadership"), "high"),
    ("Business Development Manager", "Drive growth", 80, "$75k-130k",
     ("Sales", "Strategy"), "high"),
    ("Venture Capitalist", "Invest in startups", 75, "$100k-200k",
     ("Finance", "Business"), "medium"),
)  # fmt: skip

_CYBERSECURITY_ALTERNATIVES = _alts(
    ("Security Analyst", "Monitor and respond to security threats", 90, "$70k-100k",
     ("Security Monitoring", "Incident Response", "SIEM"), "high", "mid"),
    ("Ethical Hacker", "Identify vulnerabilities through authorized hacking", 92, "$80k-120k",
     ("Penetration Testing", "Vulnerability Assessment", "Exploits"), "high", "mid"),
    ("SOC Analyst", "Work in Security Operations Center", 85, "$65k-95k",
     ("Threat Detection", "Log Analysis", "Security Tools"), "high", "entry"),
    ("Security Engineer", "Design and implement security systems", 88, "$90k-130k",
     ("Security Architecture", "Firewalls", "Encryption"), "high", "senior"),
    ("Penetration Tester Intern", "Gain hands-on security experience", 80, "$15-25/hour",
     ("Basic Security", "Networking", "Linux"), "high", "internship"),
)  # fmt: skip

_CREATIVE_ALTERNATIVES = _alts(
    ("3D Animator", "Create 3D animations and visual effects", 90, "$55k-85k",
     ("3D Modeling", "Animation", "Cinema 4D/Blender"), "high"),
    ("Video Editor", "Edit and produce video content", 85, "$50k-75k",
     ("Premiere Pro", "Storytelling", "Post-Production"), "high"),
    ("VFX Artist", "Create visual effects for film and TV", 88, "$60k-95k",
     ("VFX Software", "Compositing", "Visual Effects"), "high"),
    ("Creative Director", "Lead creative teams and campaigns", 80, "$80k-120k",
     ("Creative Leadership", "Strategy", "Team Management"), "medium"),
)  # fmt: skip

_CONSTRUCTION_ALTERNATIVES = _alts(
    ("Project Manager", "Oversee construction projects", 90, "$65k-95k",
     ("Project Management", "Scheduling", "Budgeting"), "high"),
    ("Site Supervisor", "Manage on-site operations", 85, "$55k-80k",
     ("Site Management", "Safety", "Coordination"), "medium"),
    ("Civil Engineer", "Design construction projects", 88, "$70k-100k",
     ("Civil Engineering", "AutoCAD", "Structural Analysis"), "high"),
    ("Safety Manager", "Ensure construction site safety", 80, "$60k-85k",
     ("Safety Management", "OSHA", "Risk Assessment"), "medium"),
)  # fmt: skip

_SURVEYOR_ALTERNATIVES = _alts(
    ("Land Surveyor", "Measure and map land boundaries", 95, "$55k-85k",
     ("Surveying", "GPS/GNSS", "AutoCAD", "GIS"), "medium", "mid"),
    ("Quantity Surveyor", "Manage construction project costs", 88, "$60k-90k",
     ("Cost Estimation", "Project Management", "Construction Knowledge"), "high", "mid"),
    ("Geospatial Surveyor", "Create spatial data and maps", 90, "$50k-75k",
     ("GIS", "Remote Sensing", "Spatial Analysis", "GPS"), "high", "entry"),
    ("Hydrographic Surveyor", "Survey water bodies and coastlines", 85, "$55k-80k",
     ("Hydrography", "Sonar", "Mapping", "Marine Navigation"), "medium", "mid"),
    ("Survey Manager", "Oversee surveying teams and projects", 82, "$75k-110k",
     ("Leadership", "Project Management", "Surveying", "Client Relations"), "medium", "senior"),
)  # fmt: skip

_HEALTHCARE_ALTERNATIVES = _alts(
    ("Registered Nurse", "Provide direct patient care", 92, "$60k-85k",
     ("Nursing Degree", "Patient Care", "Medical Knowledge"), "high"),
    ("Medical Assistant", "Support physicians and nurses", 85, "$30k-45k",
     ("Medical Terminology", "Clinical Skills", "Patient Communication"), "high"),
    ("Healthcare Administrator", "Manage healthcare facilities", 80, "$70k-100k",
     ("Healthcare Management", "Administration", "Leadership"), "medium"),
    ("Physician Assistant", "Diagnose and treat patients", 88, "$90k-120k",
     ("Medical Degree", "Diagnostics", "Patient Care"), "high"),
)  # fmt: skip

_EDUCATION_ALTERNATIVES = _alts(
    ("Teacher", "Educate students in classrooms", 95, "$45k-70k",
     ("Teaching License", "Curriculum Design", "Classroom Management"), "medium"),
    ("Professor", "Teach at university level", 88, "$60k-100k",
     ("Advanced Degree", "Research", "Teaching"), "medium"),
    ("Instructional Designer", "Design learning experiences", 85, "$55k-85k",
     ("Instructional Design", "E-Learning", "Curriculum"), "high"),
    ("Education Administrator", "Manage schools and programs", 80, "$70k-110k",
     ("Leadership", "Administration", "Education Policy"), "medium"),
)  # fmt: skip

_LEGAL_ALTERNATIVES = _alts(
    ("Attorney", "Represent clients in legal matters", 95, "$80k-150k",
     ("Law Degree", "Bar License", "Legal Research"), "medium"),
    ("Paralegal", "Assist lawyers with legal work", 85, "$45k-65k",
     ("Legal Knowledge", "Research", "Documentation"), "medium"),
    ("Legal Consultant", "Advise on legal matters", 88, "$70k-120k",
     ("Legal Expertise", "Consulting", "Business Law"), "high"),
    ("Compliance Officer", "Ensure regulatory compliance", 80, "$60k-95k",
     ("Compliance", "Regulations", "Risk Management"), "high"),
)  # fmt: skip

_FINANCE_ALTERNATIVES = _alts(
    ("Financial Analyst", "Analyze investments and financial data", 92, "$60k-90k",
     ("Financial Analysis", "Excel", "Modeling"), "high"),
    ("Accountant", "Manage financial records and taxes", 90, "$50k-75k",
     ("Accounting", "CPA", "Tax Knowledge"), "medium"),
    ("Investment Banker", "Facilitate financial transactions", 85, "$100k-200k",
     ("Finance", "M&A", "Client Relations"), "high"),
    ("CFO", "Lead company financial strategy", 80, "$130k-250k",
     ("Strategic Finance", "Leadership", "Business Acumen"), "medium"),
)  # fmt: skip

_ENGINEERING_ALTERNATIVES = _alts(
    ("Mechanical Engineer", "Design mechanical systems", 92, "$70k-100k",
     ("Mechanical Engineering", "CAD", "Design"), "high"),
    ("Civil Engineer", "Design infrastructure projects", 90, "$65k-95k",
     ("Civil Engineering", "AutoCAD", "Structural Analysis"), "medium"),
    ("Electrical Engineer", "Work with electrical systems", 88, "$75k-110k",
     ("Electrical Engineering", "Circuit Design", "Power Systems"), "high"),
    ("Project Engineer", "Manage engineering projects", 85, "$80k-120k",
     ("Project Management", "Engineering", "Leadership"), "high"),
)  # fmt: skip

_CLIMATE_ALTERNATIVES = _alts(
    ("Environmental Consultant", "Advise on sustainability", 85, "$55k-95k",
     ("Environmental Science", "Policy"), "high"),
    ("Sustainability Manager", "Lead sustainability initiatives", 80, "$70k-120k",
     ("Sustainability", "Management"), "high"),
    ("Environmental Policy Analyst", "Shape environmental policy", 75, "$60k-90k",
     ("Policy", "Research"), "medium"),
)  # fmt: skip

# =============================================================================
# Domain Table
# =============================================================================


@dataclass(frozen=True)
class FallbackEntry:
    """One row of the fallback table."""

    related_roles: tuple[str, ...]
    career_path: dict[str, Any]
    alternatives: tuple[dict[str, Any], ...]


def _entry(roles: tuple[str, ...], path: dict[str, Any], alternatives: tuple[dict[str, Any], ...]) -> FallbackEntry:
    return FallbackEntry(related_roles=roles, career_path=path, alternatives=alternatives)


# Insertion order matters: generic matching scans keys in this order.
FALLBACK_TABLE: dict[str, FallbackEntry] = {
    "technology": _entry(
        ("Software Developer", "System Analyst", "Technical Lead", "DevOps Engineer"),
        _TECH_PATH,
        _TECH_ALTERNATIVES,
    ),
    "business": _entry(
        ("Business Analyst", "Project Manager", "Operations Manager", "Strategy Consultant"),
        _BUSINESS_PATH,
        _BUSINESS_ALTERNATIVES,
    ),
    "startup founder": _entry(
        ("Entrepreneur", "CEO", "Product Manager", "Business Development"),
        _STARTUP_PATH,
        _STARTUP_ALTERNATIVES,
    ),
    "entrepreneur": _entry(
        ("Startup Founder", "Business Owner", "Consultant", "Investor"),
        _STARTUP_PATH,
        _STARTUP_ALTERNATIVES,
    ),
    "data scientist": _entry(
        ("Machine Learning Engineer", "Data Analyst", "AI Engineer", "Business Intelligence Analyst"),
        _DATA_SCIENCE_PATH,
        _DATA_SCIENCE_ALTERNATIVES,
    ),
    "data science": _entry(
        ("Data Scientist", "ML Engineer", "Data Engineer", "Analytics Manager"),
        _DATA_SCIENCE_PATH,
        _DATA_SCIENCE_ALTERNATIVES,
    ),
    "penetration tester": _entry(
        ("Security Analyst", "Ethical Hacker", "SOC Analyst", "Security Engineer"),
        _CYBERSECURITY_PATH,
        _CYBERSECURITY_ALTERNATIVES,
    ),
    "cybersecurity": _entry(
        ("Penetration Tester", "Security Analyst", "Incident Responder", "Security Architect"),
        _CYBERSECURITY_PATH,
        _CYBERSECURITY_ALTERNATIVES,
    ),
    "security": _entry(
        ("Cybersecurity Analyst", "Penetration Tester", "Security Engineer", "InfoSec Specialist"),
        _CYBERSECURITY_PATH,
        _CYBERSECURITY_ALTERNATIVES,
    ),
    "climate scientist": _entry(
        ("Environmental Scientist", "Sustainability Consultant", "Research Scientist", "Policy Advisor"),
        _CLIMATE_PATH,
        _CLIMATE_ALTERNATIVES,
    ),
    "environmental": _entry(
        ("Climate Scientist", "Conservation Biologist", "Sustainability Manager", "Environmental Engineer"),
        _CLIMATE_PATH,
        _CLIMATE_ALTERNATIVES,
    ),
    "motion graphics": _entry(
        ("3D Animator", "VFX Artist", "Video Editor", "Creative Director"),
        _MOTION_GRAPHICS_PATH,
        _CREATIVE_ALTERNATIVES,
    ),
    "animation": _entry(
        ("Motion Graphics Artist", "3D Modeler", "Character Animator", "VFX Compositor"),
        _MOTION_GRAPHICS_PATH,
        _CREATIVE_ALTERNATIVES,
    ),
    "designer": _entry(
        ("UI/UX Designer", "Graphic Designer", "Product Designer", "Brand Designer"),
        _DESIGN_PATH,
        _CREATIVE_ALTERNATIVES,
    ),
    "construction": _entry(
        ("Project Manager", "Site Supervisor", "Civil Engineer", "Safety Manager"),
        _CONSTRUCTION_PATH,
        _CONSTRUCTION_ALTERNATIVES,
    ),
    "surveyor": _entry(
        ("Land Surveyor", "Quantity Surveyor", "Geospatial Surveyor", "Site Engineer"),
        _SURVEYOR_PATH,
        _SURVEYOR_ALTERNATIVES,
    ),
    "healthcare": _entry(
        ("Registered Nurse", "Medical Assistant", "Healthcare Administrator", "Physician"),
        _HEALTHCARE_PATH,
        _HEALTHCARE_ALTERNATIVES,
    ),
    "education": _entry(
        ("Teacher", "Professor", "Instructional Designer", "Education Administrator"),
        _EDUCATION_PATH,
        _EDUCATION_ALTERNATIVES,
    ),
    "legal": _entry(
        ("Attorney", "Paralegal", "Legal Consultant", "Compliance Officer"),
        _LEGAL_PATH,
        _LEGAL_ALTERNATIVES,
    ),
    "finance": _entry(
        ("Financial Analyst", "Accountant", "Investment Banker", "CFO"),
        _FINANCE_PATH,
        _FINANCE_ALTERNATIVES,
    ),
    "engineering": _entry(
        ("Mechanical Engineer", "Civil Engineer", "Electrical Engineer", "Project Engineer"),
        _ENGINEERING_PATH,
        _ENGINEERING_ALTERNATIVES,
    ),
    DEFAULT_TABLE_KEY: _entry(
        ("Specialist", "Coordinator", "Manager", "Director"),
        _GENERIC_PATH,
        _GENERIC_ALTERNATIVES,
    ),
}

# =============================================================================
# Matching
# =============================================================================


def _any_of(*words: str) -> Callable[[str], bool]:
    return lambda role: any(word in role for word in words)


def _is_non_software_engineering(role: str) -> bool:
    if "engineer" in role and "software" not in role and "developer" not in role:
        return True
    return _any_of("mechanical", "civil eng", "electrical eng", "structural")(role)


def _is_motion_graphics(role: str) -> bool:
    if "motion" in role or "animation" in role:
        return True
    return "graphics" in role and ("artist" in role or "designer" in role)


# Most specific first; the first matching rule wins.
KEYWORD_RULES: tuple[tuple[Callable[[str], bool], str], ...] = (
    (
        _any_of("security", "penetration", "pentester", "ethical hack", "cybersec", "infosec"),
        "penetration tester",
    ),
    (_any_of("data scien", "ml engineer", "machine learning", "ai engineer"), "data scientist"),
    (
        _any_of("doctor", "nurse", "physician", "medic", "healthcare", "clinical", "medical"),
        "healthcare",
    ),
    (_any_of("lawyer", "attorney", "legal", "paralegal", "law "), "legal"),
    (_any_of("teacher", "professor", "educator", "instructor", "tutor"), "education"),
    (
        _any_of(
            "accountant", "cpa", "financial analyst", "finance ", "investment", "banker", "auditor"
        ),
        "finance",
    ),
    (
        _any_of("construction", "builder", "carpenter", "electrician", "plumber", "contractor"),
        "construction",
    ),
    (_any_of("surveyor", "surveying"), "surveyor"),
    (_is_non_software_engineering, "engineering"),
    (_is_motion_graphics, "motion graphics"),
    (_any_of("designer", "design"), "designer"),
    (_any_of("founder", "entrepreneur", "startup"), "startup founder"),
    (_any_of("climate", "environmental"), "climate scientist"),
    (_any_of("data analyst", "business analyst"), "business"),
    (_any_of("business", "manager", "operations", "sales", "marketing"), "business"),
    (_any_of("developer", "software", "programmer", "coding"), "technology"),
)


def _generic_match(role: str) -> str | None:
    if not role:
        return None
    role_words = role.split()
    for key in FALLBACK_TABLE:
        if key in role or role in key:
            return key
        key_words = key.split(" ")
        if any(len(word) > 3 and word in key_words for word in role_words):
            return key
    return None


def match_fallback_key(job_role: str, domain: str) -> str:
    """Pick the fallback table key for a job role and domain.

    Args:
        job_role: Target role as entered by the user.
        domain: Career domain.

    Returns:
        A key of FALLBACK_TABLE; ``default`` when nothing matches or both
        inputs are blank.
    """
    role = job_role.strip().lower()
    if role in FALLBACK_TABLE:
        return role

    domain_key = domain.strip().lower()
    if domain_key in FALLBACK_TABLE:
        return domain_key

    if not role:
        return DEFAULT_TABLE_KEY

    for predicate, key in KEYWORD_RULES:
        if predicate(role):
            return key

    return _generic_match(role) or DEFAULT_TABLE_KEY


# =============================================================================
# Result Builders
# =============================================================================

_SALARY_BANDS: dict[str, tuple[int, int]] = {
    "entry": (45000, 70000),
    "junior": (60000, 85000),
    "mid": (80000, 110000),
    "senior": (100000, 140000),
    "expert": (130000, 180000),
}

# Checked in order against the lowercased domain
_DEFAULT_SKILLS: dict[str, tuple[str, ...]] = {
    "technology": ("Programming", "Problem Solving", "System Design"),
    "business": ("Communication", "Leadership", "Strategic Thinking"),
    "design": ("Creativity", "User Experience", "Visual Design"),
    "healthcare": ("Patient Care", "Medical Knowledge", "Empathy"),
    "education": ("Teaching", "Curriculum Development", "Student Engagement"),
}


def default_salary_range(experience_level: str) -> SalaryRange:
    low, high = _SALARY_BANDS.get(experience_level, _SALARY_BANDS["junior"])
    return SalaryRange(min=low, max=high)


def default_skills(domain: str) -> list[Skill]:
    domain_lower = domain.lower()
    key = next((k for k in _DEFAULT_SKILLS if k in domain_lower), "technology")
    return [
        Skill(id=f"skill_{index}", name=name, category="core", priority="important")
        for index, name in enumerate(_DEFAULT_SKILLS[key])
    ]


def _fallback_learning_path(request: RoadmapRequest, stamp: int) -> LearningPath:
    skills = list(request.skills)
    return LearningPath.model_validate(
        {
            "id": f"fallback_path_{stamp}",
            "title": f"{request.job_role} Fallback Path",
            "description": f"Basic learning path for {request.job_role}",
            "totalDuration": "6 months",
            "phases": [
                {
                    "id": "phase1",
                    "title": "Foundation Skills",
                    "description": f"Learn the basics of {request.domain}",
                    "duration": "3 months",
                    "priority": "critical",
                    "order": 1,
                    "skills": skills,
                    "resources": [
                        {
                            "id": "basic-course",
                            "title": f"Introduction to {request.domain}",
                            "description": f"Foundational course in {request.domain}",
                            "type": "course",
                            "provider": "Online Learning Platform",
                            "duration": "4 weeks",
                            "cost": 50,
                            "difficulty": "beginner",
                            "skills": skills,
                        }
                    ],
                }
            ],
            "estimatedCost": 500,
            "difficulty": "beginner",
            "prerequisites": ["Basic computer skills"],
            "outcomes": [f"Understanding of {request.domain}", "Ready for advanced learning"],
        }
    )


def _default_job_market() -> JobMarketInfo:
    return JobMarketInfo(
        demand="medium",
        competitiveness="medium",
        locations=["Remote", "Major Cities"],
        industry_growth=10,
        average_salary=75000,
    )


def build_fallback_roadmap(
    request: RoadmapRequest,
    now: datetime | None = None,
) -> CareerRecommendation:
    """Synthesize a roadmap from the static tables.

    Args:
        request: Roadmap request.
        now: Timestamp used for generated ids. Defaults to the wall clock.

    Returns:
        Recommendation with ``is_fallback=True`` and a summary starting
        with FALLBACK_MARKER.
    """
    key = match_fallback_key(request.job_role, request.domain)
    entry = FALLBACK_TABLE[key]
    stamp = int((now or datetime.now(UTC)).timestamp() * 1000)

    logger.info("fallback_roadmap_built", table_key=key, experience_level=request.experience_level)

    return CareerRecommendation(
        id=f"fallback_roadmap_{stamp}",
        title=request.job_role,
        description=(
            f"Career roadmap for {request.job_role} in {request.domain} "
            f"({request.experience_level} level)"
        ),
        fit_score=75,
        salary_range=default_salary_range(request.experience_level),
        growth_prospects="medium",
        required_skills=default_skills(request.domain),
        recommended_path=_fallback_learning_path(request, stamp),
        job_market_data=_default_job_market(),
        primary_career=request.job_role,
        related_roles=list(entry.related_roles),
        career_path=CareerPath.model_validate(entry.career_path),
        alternatives=[AlternativeCareer.model_validate(alt) for alt in entry.alternatives],
        summary=(
            f"{FALLBACK_MARKER} Comprehensive career roadmap for {request.job_role} "
            f"designed for {request.experience_level} level professionals."
        ),
        is_fallback=True,
    )


def build_fallback_alternatives(request: RoadmapRequest) -> list[AlternativeCareer]:
    """Alternative careers from the table row matching the request."""
    key = match_fallback_key(request.job_role, request.domain)
    return [AlternativeCareer.model_validate(alt) for alt in FALLBACK_TABLE[key].alternatives]


def is_fallback_result(recommendation: CareerRecommendation) -> bool:
    return recommendation.is_fallback or recommendation.summary.startswith(FALLBACK_MARKER)
