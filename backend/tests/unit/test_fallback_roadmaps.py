"""Tests for the offline fallback roadmap tables."""

from dataclasses import replace

import pytest

from smartapply.services.fallback_roadmaps import (
    DEFAULT_TABLE_KEY,
    FALLBACK_MARKER,
    FALLBACK_TABLE,
    build_fallback_alternatives,
    build_fallback_roadmap,
    default_salary_range,
    default_skills,
    is_fallback_result,
    match_fallback_key,
)

# =============================================================================
# Matching
# =============================================================================


class TestMatchFallbackKey:
    @pytest.mark.parametrize(
        "job_role, domain, expected",
        [
            # Exact role key, case-insensitive
            ("Data Scientist", "Anything", "data scientist"),
            ("PENETRATION TESTER", "Anything", "penetration tester"),
            # Domain key when the role is unknown
            ("Astronaut", "Business", "business"),
            ("Astronaut", "Healthcare", "healthcare"),
            # Keyword rules
            ("Ethical Hacker", "Tech", "penetration tester"),
            ("Machine Learning Researcher", "Tech", "data scientist"),
            ("Registered Nurse", "Care", "healthcare"),
            ("Corporate Attorney", "Law", "legal"),
            ("High School Teacher", "Schools", "education"),
            ("Senior Accountant", "Money", "finance"),
            ("Master Electrician", "Trades", "construction"),
            ("Mechanical Engineer", "Industry", "engineering"),
            ("Software Engineer", "Industry", "technology"),
            ("Motion Designer", "Media", "motion graphics"),
            ("Graphic Designer", "Media", "designer"),
            ("Startup Founder", "Ventures", "startup founder"),
            ("Sales Manager", "Retail", "business"),
            ("Frontend Developer", "Web", "technology"),
            # Nothing matches
            ("Astronaut", "Space", DEFAULT_TABLE_KEY),
        ],
    )
    def test_matching(self, job_role, domain, expected):
        assert match_fallback_key(job_role, domain) == expected

    @pytest.mark.parametrize("job_role", ["", " ", "   \t"])
    def test_blank_role_uses_default(self, job_role):
        assert match_fallback_key(job_role, "Unknown") == DEFAULT_TABLE_KEY

    def test_blank_role_still_honours_known_domain(self):
        assert match_fallback_key(" ", " Technology ") == "technology"

    def test_role_is_trimmed_before_lookup(self):
        assert match_fallback_key("  Nurse  ", "") == match_fallback_key("Nurse", "")

    def test_every_rule_target_exists(self):
        # Every key returned must index the table
        for role in ("security", "nurse", "paralegal", "tutor", "cpa", "plumber", "surveyor"):
            assert match_fallback_key(role, "") in FALLBACK_TABLE


# =============================================================================
# Builders
# =============================================================================


class TestBuildFallbackRoadmap:
    def test_marks_result_as_fallback(self, roadmap_request):
        result = build_fallback_roadmap(roadmap_request)

        assert result.is_fallback is True
        assert result.summary.startswith(FALLBACK_MARKER)
        assert is_fallback_result(result) is True
        assert result.id.startswith("fallback_roadmap_")
        assert result.fit_score == 75

    def test_uses_matched_table_row(self, roadmap_request):
        result = build_fallback_roadmap(roadmap_request)
        entry = FALLBACK_TABLE["data scientist"]

        assert result.related_roles == list(entry.related_roles)
        assert len(result.career_path.nodes) == len(entry.career_path["nodes"])
        assert [alt.id for alt in result.alternatives] == [
            f"alt{i}" for i in range(1, len(entry.alternatives) + 1)
        ]

    def test_graph_edges_reference_existing_nodes(self, roadmap_request):
        for key in FALLBACK_TABLE:
            request = replace(roadmap_request, job_role=key, domain=key)
            path = build_fallback_roadmap(request).career_path
            node_ids = {node.id for node in path.nodes}

            assert node_ids, key
            for edge in path.edges:
                assert edge.source in node_ids, key
                assert edge.target in node_ids, key

    def test_main_track_edges_are_animated(self, roadmap_request):
        path = build_fallback_roadmap(
            replace(roadmap_request, job_role="Software Developer", domain="Technology")
        ).career_path

        first = next(edge for edge in path.edges if edge.id == "e1-2")
        assert first.animated is True
        assert first.source_handle == "bottom"
        assert first.target_handle == "top"

    def test_salary_band_follows_experience(self, roadmap_request):
        senior = build_fallback_roadmap(replace(roadmap_request, experience_level="senior"))

        assert (senior.salary_range.min, senior.salary_range.max) == (100000, 140000)

    def test_unknown_role_gets_default_row(self, roadmap_request):
        request = replace(roadmap_request, job_role="Astronaut", domain="Space")

        result = build_fallback_roadmap(request)

        assert result.related_roles == list(FALLBACK_TABLE[DEFAULT_TABLE_KEY].related_roles)
        assert result.primary_career == "Astronaut"


class TestDefaults:
    @pytest.mark.parametrize(
        "level, expected",
        [
            ("entry", (45000, 70000)),
            ("mid", (80000, 110000)),
            ("expert", (130000, 180000)),
            ("unknown", (60000, 85000)),
        ],
    )
    def test_default_salary_range(self, level, expected):
        salary = default_salary_range(level)

        assert (salary.min, salary.max) == expected

    def test_default_skills_by_domain(self):
        assert [s.name for s in default_skills("Healthcare & Medicine")] == [
            "Patient Care",
            "Medical Knowledge",
            "Empathy",
        ]
        assert default_skills("Underwater Basket Weaving")[0].name == "Programming"

    def test_fallback_alternatives(self, roadmap_request):
        alternatives = build_fallback_alternatives(roadmap_request)

        assert alternatives[0].title == "Machine Learning Engineer"
        assert all(alt.match_score > 0 for alt in alternatives)
