"""
Unit tests for src/common/skill_merge.py and the coercion helpers in
src/common/skill_types.py

Tests the merge engine:
- Case/whitespace-insensitive merge key
- Max confidence on repeat merges
- Occurrence counting
- Evidence concatenation
- Source set semantics
- Profile skill coercion (documents and bare strings)
"""

import pytest

from src.common.skill_merge import DEFAULT_MERGE_CONFIDENCE, count_sources, merge_key, merge_skills
from src.common.skill_types import (
    ProfileSkill,
    SkillCandidate,
    coerce_candidate,
    coerce_candidates,
    coerce_evidence,
    coerce_profile_skill,
)


def candidate(name, confidence=0.7, evidence=None, category="tool"):
    return SkillCandidate(
        name=name,
        category=category,
        proficiency="intermediate",
        evidence=list(evidence or []),
        confidence=confidence,
    )


# ===== TESTS: Merge Key =====

class TestMergeKey:
    """Tests for merge key normalization."""

    @pytest.mark.parametrize("name", ["Docker", "docker", " DOCKER ", "\tDocker\n"])
    def test_key_ignores_case_and_whitespace(self, name):
        assert merge_key(name) == "docker"

    def test_empty_name(self):
        assert merge_key("") == ""
        assert merge_key(None) == ""


# ===== TESTS: Merge Engine =====

class TestMergeSkills:
    """Tests for merge_skills()."""

    def test_new_skill_inserted_with_defaults(self):
        """Should insert a new ProfileSkill for an unknown key."""
        merged = merge_skills([], [candidate("Python", 0.9, ["e1"], "programming_language")], "cv", now="T0")

        assert len(merged) == 1
        skill = merged[0]
        assert skill.name == "Python"
        assert skill.category == "programming_language"
        assert skill.confidence == 0.9
        assert skill.verified is False
        assert skill.occurrences == 1
        assert skill.evidence == ["e1"]
        assert skill.sources == {"cv"}
        assert skill.created_at == "T0"

    def test_missing_category_becomes_uncategorized(self):
        merged = merge_skills([], [candidate("Rust", category="")], "cv")
        assert merged[0].category == "Uncategorized"

    def test_zero_confidence_uses_default(self):
        merged = merge_skills([], [candidate("Rust", confidence=0.0)], "cv")
        assert merged[0].confidence == DEFAULT_MERGE_CONFIDENCE

    def test_case_variants_collapse_to_one_skill(self):
        """Names differing only by case/whitespace should yield one ProfileSkill."""
        merged = merge_skills([], [candidate("Docker"), candidate(" docker ")], "github")
        assert len(merged) == 1
        assert merged[0].name == "Docker"
        assert merged[0].occurrences == 2

    def test_confidence_is_max_not_average(self):
        """Merging 0.6 then 0.9 should end at 0.9."""
        merged = merge_skills([], [candidate("Go", 0.6)], "cv")
        merged = merge_skills(merged, [candidate("Go", 0.9)], "github")
        assert merged[0].confidence == 0.9

    def test_lower_confidence_does_not_overwrite(self):
        merged = merge_skills([], [candidate("Go", 0.9)], "cv")
        merged = merge_skills(merged, [candidate("Go", 0.6)], "github")
        assert merged[0].confidence == 0.9

    @pytest.mark.parametrize("n", [1, 2, 5])
    def test_occurrences_count_merges(self, n):
        """Merging a skill N times should yield occurrences == N."""
        merged = []
        for i in range(n):
            merged = merge_skills(merged, [candidate("SQL")], "cv" if i % 2 else "github")
        assert merged[0].occurrences == n

    def test_evidence_accumulates(self):
        """Evidence length should equal the sum of merged evidence lengths."""
        batches = [["a"], ["b", "c"], [], ["d", "e", "f"]]
        merged = []
        for batch in batches:
            merged = merge_skills(merged, [candidate("Kafka", evidence=batch)], "cv")
        assert len(merged[0].evidence) == sum(len(b) for b in batches)
        assert merged[0].evidence == ["a", "b", "c", "d", "e", "f"]

    def test_same_source_is_not_duplicated(self):
        """Merging twice from one source should keep a single source entry."""
        merged = merge_skills([], [candidate("AWS")], "cv")
        merged = merge_skills(merged, [candidate("AWS")], "cv")
        assert merged[0].sources == {"cv"}
        assert merged[0].to_dict()["sources"] == ["cv"]

    def test_unmatched_existing_skills_untouched(self):
        existing = [ProfileSkill(name="Java", category="programming_language", confidence=0.4)]
        merged = merge_skills(existing, [candidate("Scala")], "github")

        assert [s.name for s in merged] == ["Java", "Scala"]
        assert merged[0].confidence == 0.4
        assert merged[0].occurrences == 1

    def test_candidates_without_name_are_skipped(self):
        merged = merge_skills([], [candidate("  ")], "cv")
        assert merged == []

    def test_end_to_end_cv_then_github(self):
        """Existing "docker" from cv merged with "Docker" from github."""
        existing = [
            coerce_profile_skill({
                "name": "docker",
                "confidence": 0.5,
                "occurrences": 1,
                "sources": ["cv"],
                "evidence": ["e1"],
            })
        ]

        merged = merge_skills(existing, [SkillCandidate(name="Docker", confidence=0.8, evidence=["e2"])], "github")

        assert len(merged) == 1
        skill = merged[0]
        assert skill.name == "docker"
        assert skill.confidence == 0.8
        assert skill.occurrences == 2
        assert skill.sources == {"cv", "github"}
        assert skill.evidence == ["e1", "e2"]


class TestCountSources:
    """Tests for count_sources()."""

    def test_counts_distinct_sources(self):
        skills = [
            ProfileSkill(name="a", category="x", confidence=1, sources={"cv", "github"}),
            ProfileSkill(name="b", category="x", confidence=1, sources={"github", "linkedin"}),
        ]
        assert count_sources(skills) == 3

    def test_no_skills(self):
        assert count_sources([]) == 0


# ===== TESTS: Coercion =====

class TestCoercion:
    """Tests for boundary coercion of raw skill data."""

    def test_evidence_string_becomes_list(self):
        assert coerce_evidence("Led a team") == ["Led a team"]

    def test_evidence_none_becomes_empty(self):
        assert coerce_evidence(None) == []

    def test_candidate_defaults(self):
        """Missing category/proficiency/confidence get defaults."""
        result = coerce_candidate({"name": "Terraform"})
        assert result.category == "other"
        assert result.proficiency == "intermediate"
        assert result.confidence == 0.5
        assert result.evidence == []

    def test_candidate_unknown_category_becomes_other(self):
        assert coerce_candidate({"name": "X", "category": "magic"}).category == "other"

    def test_candidate_confidence_clamped(self):
        assert coerce_candidate({"name": "X", "confidence": 7}).confidence == 1.0
        assert coerce_candidate({"name": "X", "confidence": "high"}).confidence == 0.5

    def test_candidate_rejects_bare_string(self):
        """Model output must be objects; bare strings are dropped."""
        assert coerce_candidate("Python") is None

    def test_candidates_drop_unusable_entries(self):
        result = coerce_candidates([{"name": "A"}, {"category": "tool"}, 42, "B"])
        assert [c.name for c in result] == ["A"]

    def test_profile_skill_from_legacy_string(self):
        """A bare-string stored skill becomes a full ProfileSkill."""
        skill = coerce_profile_skill("GraphQL")
        assert skill.name == "GraphQL"
        assert skill.category == "Uncategorized"
        assert skill.confidence == 0.8
        assert skill.occurrences == 1
        assert skill.sources == set()

    def test_profile_skill_reads_legacy_created_at(self):
        skill = coerce_profile_skill({"name": "Go", "createdAt": "2024-01-01T00:00:00"})
        assert skill.created_at == "2024-01-01T00:00:00"

    def test_profile_skill_occurrences_from_stored_strings(self):
        """Stored occurrences of any shape coerce to an int >= 1."""
        assert coerce_profile_skill({"name": "Go", "occurrences": "2.0"}).occurrences == 2
        assert coerce_profile_skill({"name": "Go", "occurrences": "3"}).occurrences == 3
        assert coerce_profile_skill({"name": "Go", "occurrences": "many"}).occurrences == 1
        assert coerce_profile_skill({"name": "Go", "occurrences": 0}).occurrences == 1
        assert coerce_profile_skill({"name": "Go", "occurrences": None}).occurrences == 1

    def test_profile_skill_without_name(self):
        assert coerce_profile_skill({"category": "tool"}) is None

    def test_profile_skill_to_dict(self):
        skill = ProfileSkill(
            name="Go", category="programming_language", confidence=0.9,
            evidence=["a", "b"], sources={"github", "cv"},
        )
        data = skill.to_dict()
        assert data["sources"] == ["cv", "github"]
        assert data["evidence_count"] == 2
