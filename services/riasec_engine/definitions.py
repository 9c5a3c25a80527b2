# services/riasec_engine/definitions.py
# Static policy data for RIASEC scoring and report composition.

from typing import Dict, Tuple

# --- Dimensions ---

RIASEC_CODES: Tuple[str, ...] = ("R", "I", "A", "S", "E", "C")

# Test sections 5..10 carry the six personality dimensions, in this order.
SECTION_TO_CODE: Dict[int, str] = {
    5: "R",
    6: "I",
    7: "A",
    8: "S",
    9: "E",
    10: "C",
}
DIMENSION_SECTION_ORDINALS: Tuple[int, ...] = tuple(sorted(SECTION_TO_CODE))

DIMENSIONS: Dict[str, Dict[str, str]] = {
    "R": {
        "label": "Realistic",
        "title": "Realistic (Doers)",
        "tagline": "Practical, hands-on, and action-oriented tasks.",
    },
    "I": {
        "label": "Investigative",
        "title": "Investigative (Thinkers)",
        "tagline": "Analytical, research-oriented, and problem-solving tasks.",
    },
    "A": {
        "label": "Artistic",
        "title": "Artistic (Creators)",
        "tagline": "Creative, expressive, and innovative tasks.",
    },
    "S": {
        "label": "Social",
        "title": "Social (Helpers)",
        "tagline": "People-oriented, supportive, and service-focused tasks.",
    },
    "E": {
        "label": "Enterprising",
        "title": "Enterprising (Persuaders)",
        "tagline": "Leadership, influence, and business-oriented tasks.",
    },
    "C": {
        "label": "Conventional",
        "title": "Conventional (Organizers)",
        "tagline": "Structured, organized, and detail-oriented tasks.",
    },
}

# --- Answer values ---

LIKERT_SCALE = "LIKERT_SCALE"
MULTIPLE_CHOICE = "MULTIPLE_CHOICE"

LIKERT_VALUES: Dict[str, float] = {"A": 1.0, "B": 2.0, "C": 3.0, "D": 4.0, "E": 5.0}
LIKERT_NEUTRAL = 3.0

# --- Match levels and decision risk ---

HIGH_MATCH_THRESHOLD = 30
MODERATE_MATCH_THRESHOLD = 15

HIGH_MATCH = "HIGH MATCH"
MODERATE_MATCH = "MODERATE MATCH"
LOW_MATCH = "LOW MATCH"

LOW_RISK = "Low Risk"
MODERATE_RISK = "Moderate Risk"
HIGH_RISK = "High Risk"

HIGHLY_STABLE = "Highly Stable"
MODERATELY_STABLE = "Moderately Stable"
DEVELOPING = "Developing"

# --- Pathway confidence ---

CONFIDENCE_LABELS: Dict[str, str] = {
    "HIGH": "High Confidence",
    "MODERATE": "Moderate Confidence",
    "LOW": "Low Confidence",
}

PATHWAY_COUNT = 5

# --- Career pathway lookup tables ---

FALLBACK_DEGREES: Tuple[str, ...] = (
    "BCA",
    "MCA",
    "M.Sc (IT)",
    "M.Sc (Computer Science)",
    "B.Tech (CS)",
    "B.Tech (IT)",
    "B.E. (Computer Engineering)",
    "B.Sc (IT)",
    "B.Sc (Computer Science)",
    "B.Voc (SD)",
)
DEFAULT_DEGREE = "B.Tech (CS)"

FALLBACK_ROLES: Tuple[str, ...] = (
    "Full Stack Developer",
    "Frontend Developer",
    "Backend Developer",
    "Mobile App Developer",
    "Data Analyst",
    "Data Scientist",
    "Data Engineer",
    "DevOps Engineer",
    "Cloud Engineer",
    "Web Designer",
    "UI/UX Designer",
    "Product Designer",
    "Software Tester",
    "Cybersecurity Analyst",
    "AI / ML Engineer",
    "Game Developer",
)
DEFAULT_ROLE = "Full Stack Developer"

# Keyed by ordered (primary, secondary) pairs. Pairs not listed use the default.
DEGREE_BY_PAIR: Dict[Tuple[str, str], str] = {
    ("I", "A"): "B.Tech (CS)",
    ("A", "I"): "BCA",
    ("I", "C"): "M.Sc (IT)",
    ("C", "I"): "B.Tech (IT)",
    ("A", "C"): "BCA",
    ("C", "A"): "B.Voc (SD)",
    ("R", "I"): "B.E. (Computer Engineering)",
    ("I", "R"): "B.Tech (CS)",
    ("R", "A"): "B.E. (Computer Engineering)",
    ("A", "R"): "BCA",
    ("R", "C"): "B.E. (Computer Engineering)",
    ("C", "R"): "B.Tech (IT)",
    ("S", "I"): "B.Sc (Computer Science)",
    ("I", "S"): "MCA",
    ("S", "A"): "B.Sc (IT)",
    ("A", "S"): "BCA",
    ("S", "C"): "B.Sc (IT)",
    ("C", "S"): "B.Tech (IT)",
    ("E", "I"): "B.Tech (CS)",
    ("E", "A"): "BCA",
    ("E", "C"): "B.Tech (IT)",
    ("E", "S"): "B.Sc (IT)",
    ("E", "R"): "B.E. (Computer Engineering)",
    ("I", "E"): "B.Tech (CS)",
    ("A", "E"): "BCA",
    ("C", "E"): "B.Tech (IT)",
    ("S", "E"): "B.Sc (IT)",
    ("R", "E"): "B.E. (Computer Engineering)",
}

ROLE_BY_PAIR: Dict[Tuple[str, str], str] = {
    ("I", "A"): "Data Scientist",
    ("I", "C"): "Data Engineer",
    ("A", "I"): "UI/UX Designer",
    ("A", "C"): "Web Designer",
    ("C", "I"): "Data Analyst",
    ("C", "A"): "Software Tester",
    ("I", "R"): "AI / ML Engineer",
    ("R", "I"): "DevOps Engineer",
    ("A", "S"): "Product Designer",
    ("S", "A"): "Frontend Developer",
    ("I", "S"): "Backend Developer",
    ("S", "I"): "Full Stack Developer",
    ("R", "C"): "Cybersecurity Analyst",
    ("C", "R"): "Backend Developer",
    ("A", "R"): "Game Developer",
    ("R", "A"): "Cybersecurity Analyst",
    ("S", "C"): "Mobile App Developer",
    ("C", "S"): "Frontend Developer",
}

PERSONA_BY_ROLE: Dict[str, str] = {
    "Data Scientist": "The Insight Architect",
    "Data Engineer": "The Analytical Strategist",
    "UI/UX Designer": "The Creative Innovator",
    "Web Designer": "The Design Visionary",
    "Data Analyst": "The Precision Analyst",
    "Software Tester": "The Quality Specialist",
    "AI / ML Engineer": "The Intelligent Builder",
    "DevOps Engineer": "The Technical Architect",
    "Product Designer": "The User Experience Creator",
    "Frontend Developer": "The Interface Designer",
    "Backend Developer": "The System Architect",
    "Full Stack Developer": "The Solution Integrator",
    "Mobile App Developer": "The Mobile Innovator",
    "Cloud Engineer": "The Infrastructure Specialist",
    "Cybersecurity Analyst": "The Security Guardian",
    "Game Developer": "The Interactive Creator",
}
DEFAULT_PERSONA = "The Technical Professional"

FOCUS_BY_ROLE: Dict[str, str] = {
    "Data Scientist": "Analyzing complex data patterns and creating innovative solutions through research and creative problem-solving.",
    "Data Engineer": "Building robust data infrastructure and systems with analytical precision and structured methodologies.",
    "UI/UX Designer": "Designing intuitive user experiences by combining creative vision with analytical insights.",
    "Web Designer": "Creating visually compelling digital products through systematic design processes.",
    "Data Analyst": "Ensuring data quality and system reliability through meticulous analysis and testing.",
    "Software Tester": "Maintaining software quality standards through systematic testing and creative problem-solving approaches.",
    "AI / ML Engineer": "Developing intelligent systems and algorithms that solve real-world technical challenges.",
    "DevOps Engineer": "Architecting scalable infrastructure solutions with technical expertise and innovative approaches.",
    "Product Designer": "Creating user-centered design solutions that balance creativity with technical feasibility.",
    "Frontend Developer": "Building engaging user interfaces that combine aesthetic design with functional requirements.",
    "Backend Developer": "Designing and implementing backend systems that integrate complex technical requirements.",
    "Full Stack Developer": "Developing end-to-end solutions that seamlessly connect frontend and backend technologies.",
    "Mobile App Developer": "Creating mobile applications that deliver seamless user experiences across platforms.",
    "Cloud Engineer": "Designing and managing cloud infrastructure solutions for scalable and reliable systems.",
    "Cybersecurity Analyst": "Protecting digital assets through systematic security analysis and threat mitigation.",
    "Game Developer": "Creating interactive entertainment experiences through creative design and technical implementation.",
}
DEFAULT_FOCUS = "Developing software solutions through systematic analysis and implementation."

# --- Narrative post-processing ---

DISCOURAGED_PHRASES: Tuple[str, ...] = (
    "lack of highly dominant interests",
    "broad but not deeply specialized",
    "may require further refinement",
    "requires further refinement",
    "needs further refinement",
)
