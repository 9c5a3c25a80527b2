# tests/riasec/test_pathways.py
import pytest

from services.riasec_engine.composer import calculate_confidence, compose_deterministic_sections


def test_pathways_for_a_focused_realistic_profile():
    sections = compose_deterministic_sections({"R": 85, "I": 70, "A": 10, "S": 5, "E": 5, "C": 5})
    pathways = sections.career_pathways

    assert [p.career_role for p in pathways] == [
        "DevOps Engineer",
        "Cybersecurity Analyst",
        "Data Scientist",
        "Full Stack Developer",
        "Frontend Developer",
    ]
    assert [p.degree for p in pathways] == [
        "B.E. (Computer Engineering)",
        "B.Tech (CS)",
        "BCA",
        "MCA",
        "M.Sc (IT)",
    ]
    assert [p.professional_persona for p in pathways] == [
        "The Technical Architect",
        "The Security Guardian",
        "The Insight Architect",
        "The Solution Integrator",
        "The Interface Designer",
    ]
    assert {p.riasec_mix for p in pathways} == {"R-I-A"}
    assert {p.confidence_level for p in pathways} == {"HIGH"}
    assert pathways[0].confidence == "High Confidence"


def test_pathways_for_all_zero_scores():
    sections = compose_deterministic_sections({c: 0 for c in "RIASEC"})
    pathways = sections.career_pathways

    assert [t.code for t in sections.top_traits] == ["A", "C", "E"]
    assert [p.career_role for p in pathways] == [
        "Web Designer",
        "Full Stack Developer",
        "Frontend Developer",
        "Backend Developer",
        "Mobile App Developer",
    ]
    assert [p.degree for p in pathways] == ["BCA", "B.Tech (IT)", "B.Voc (SD)", "MCA", "M.Sc (IT)"]
    assert {p.confidence_level for p in pathways} == {"LOW"}


@pytest.mark.parametrize("values", [
    {"R": 85, "I": 70, "A": 10, "S": 5, "E": 5, "C": 5},
    {"R": 10, "I": 20, "A": 30, "S": 40, "E": 50, "C": 60},
    {"R": 50, "I": 50, "A": 50, "S": 50, "E": 50, "C": 50},
    {"R": 0, "I": 100, "A": 0, "S": 100, "E": 0, "C": 100},
])
def test_pathways_are_five_with_unique_degrees_and_roles(values):
    pathways = compose_deterministic_sections(values).career_pathways

    assert len(pathways) == 5
    assert len({p.degree for p in pathways}) == 5
    assert len({p.career_role for p in pathways}) == 5
    assert all(p.core_tasks_focus for p in pathways)


def test_unlisted_role_uses_default_persona_and_focus():
    # (E, S) has no role entry, so the first pathway falls back to Full Stack Developer
    pathways = compose_deterministic_sections(
        {"R": 0, "I": 0, "A": 0, "S": 60, "E": 80, "C": 10}
    ).career_pathways
    assert pathways[0].career_role == "Full Stack Developer"
    assert pathways[0].professional_persona == "The Solution Integrator"


TOP3 = ["R", "I", "A"]

@pytest.mark.parametrize("mix, top3_scores, all_scores, level", [
    ("R-I-A", [85, 70, 10], {"R": 85, "I": 70, "A": 10, "S": 5, "E": 5, "C": 5}, "HIGH"),
    ("R-I-A", [28, 20, 5], {"R": 28, "I": 20, "A": 5, "S": 0, "E": 0, "C": 0}, "MODERATE"),
    ("I-S-E", [50, 40, 30], {"R": 50, "I": 40, "A": 30, "S": 35, "E": 10, "C": 0}, "MODERATE"),
    ("S-E-C", [50, 40, 30], {"R": 50, "I": 40, "A": 30, "S": 20, "E": 10, "C": 0}, "LOW"),
    ("R-I-A", [0, 0, 0], {c: 0 for c in "RIASEC"}, "LOW"),
    ("R", [85, 70, 10], {"R": 85, "I": 70, "A": 10, "S": 5, "E": 5, "C": 5}, "LOW"),
])
def test_calculate_confidence(mix, top3_scores, all_scores, level):
    confidence = calculate_confidence(mix, TOP3, top3_scores, all_scores)
    assert confidence.level == level
