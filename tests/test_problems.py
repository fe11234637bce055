"""Tests for interviewer.problems -- catalog loading, lookup and problem selection.

random.choice is patched where a test needs to know which problem the
catalog hands back.
"""

import json
from unittest.mock import patch

import pytest

from interviewer import problems as problems_module
from interviewer.problems import (
    PROBLEMS,
    ProblemSelectionError,
    get_problem,
    list_categories,
    list_problems,
    lookup,
    parse_problem_url,
    placeholder_problem,
    select_problem,
)

REQUIRED_FIELDS = {"id", "title", "difficulty", "category", "description",
                   "examples", "constraints"}


# ---------------------------------------------------------------------------
# Loading from the real problems directory
# ---------------------------------------------------------------------------

class TestLoadValidProblems:

    def test_problems_are_loaded(self):
        assert len(PROBLEMS) > 0, "No problems loaded -- check interviewer/problems/ directory"

    def test_list_problems_contains_summary_fields(self):
        for p in list_problems():
            assert set(p) == {"id", "title", "difficulty", "category"}

    def test_list_problems_filters(self):
        arrays = list_problems(category="array")
        assert {p["id"] for p in arrays} >= {"two-sum", "best-time-to-buy-sell-stock"}
        assert all(p["category"] == "array" for p in arrays)
        medium = list_problems(difficulty="Medium")
        assert medium and all(p["difficulty"] == "Medium" for p in medium)
        assert list_problems(category="array", difficulty="Hard") == []

    def test_get_problem_known_id(self):
        problem = get_problem("two-sum")
        assert problem["title"] == "Two Sum"
        assert problem["category"] == "array"

    def test_get_problem_unknown_id(self):
        assert get_problem("nonexistent-problem-xyz") is None

    def test_categories_are_sorted_and_unique(self):
        categories = list_categories()
        assert categories == sorted(set(categories))
        assert "array" in categories


# ---------------------------------------------------------------------------
# Malformed JSON handling
# ---------------------------------------------------------------------------

class TestMalformedJsonHandling:

    def test_malformed_json_file_is_skipped(self, tmp_path, monkeypatch):
        problems_dir = tmp_path / "problems"
        problems_dir.mkdir()
        (problems_dir / "bad-problem.json").write_text("{invalid json content", encoding="utf-8")
        (problems_dir / "good.json").write_text(json.dumps({"id": "good", "title": "Good"}), encoding="utf-8")

        monkeypatch.setattr(problems_module, "PROBLEMS_DIR", problems_dir)
        loaded = problems_module._load_problems()
        assert list(loaded) == ["good"]

    def test_file_without_id_is_skipped(self, tmp_path, monkeypatch):
        problems_dir = tmp_path / "problems"
        problems_dir.mkdir()
        (problems_dir / "anonymous.json").write_text(json.dumps({"title": "No id"}), encoding="utf-8")

        monkeypatch.setattr(problems_module, "PROBLEMS_DIR", problems_dir)
        assert problems_module._load_problems() == {}


# ---------------------------------------------------------------------------
# Catalog schema
# ---------------------------------------------------------------------------

class TestProblemSchema:

    def test_all_problems_have_required_fields(self):
        for pid, p in PROBLEMS.items():
            missing = REQUIRED_FIELDS - set(p)
            assert not missing, f"{pid} is missing {missing}"

    def test_difficulty_values(self):
        for pid, p in PROBLEMS.items():
            assert p["difficulty"] in {"Easy", "Medium", "Hard"}, pid

    def test_examples_have_input_and_output(self):
        for pid, p in PROBLEMS.items():
            assert p["examples"], f"{pid} has no examples"
            for ex in p["examples"]:
                assert ex["input"] and ex["output"], pid

    def test_constraints_are_strings(self):
        for pid, p in PROBLEMS.items():
            assert all(isinstance(c, str) for c in p["constraints"]), pid

    def test_no_duplicate_titles(self):
        titles = [p["title"] for p in PROBLEMS.values()]
        assert len(titles) == len(set(titles))

    def test_catalog_passes_validator(self):
        from scripts.validate_problems import validate_file

        for f in sorted(problems_module.PROBLEMS_DIR.glob("*.json")):
            assert validate_file(f) == [], f.name


# ---------------------------------------------------------------------------
# Lookup and URL parsing
# ---------------------------------------------------------------------------

class TestLookup:

    def test_random_choice_receives_filtered_candidates(self):
        with patch("interviewer.problems.random") as mock_random:
            mock_random.choice.side_effect = lambda candidates: candidates[0]

            lookup("array", "Easy")

            mock_random.choice.assert_called_once()
            candidates = mock_random.choice.call_args[0][0]
            assert candidates
            for p in candidates:
                assert p["category"] == "array"
                assert p["difficulty"] == "Easy"

    def test_no_difficulty_means_any_difficulty(self):
        with patch("interviewer.problems.random") as mock_random:
            mock_random.choice.side_effect = lambda candidates: candidates[0]
            lookup("sliding-window")
            candidates = mock_random.choice.call_args[0][0]
        assert [p["id"] for p in candidates] == ["maximum-subarray"]

    def test_empty_category_returns_none(self):
        assert lookup("quantum-computing") is None
        assert lookup("array", "Hard") is None


class TestParseProblemUrl:

    @pytest.mark.parametrize("url, slug", [
        ("https://leetcode.com/problems/two-sum/", "two-sum"),
        ("https://leetcode.com/problems/two-sum", "two-sum"),
        ("https://leetcode.com/problems/valid-parentheses/description/", "valid-parentheses"),
        ("leetcode.com/problems/lru-cache", "lru-cache"),
    ])
    def test_valid_urls(self, url, slug):
        assert parse_problem_url(url) == slug

    @pytest.mark.parametrize("url", ["https://example.com/two-sum", "two-sum", "", None, 42])
    def test_invalid_urls(self, url):
        assert parse_problem_url(url) is None

    def test_placeholder_title_is_title_cased(self):
        problem = placeholder_problem("longest-common-prefix")
        assert problem["id"] == "longest-common-prefix"
        assert problem["title"] == "Longest Common Prefix"
        assert problem["difficulty"] == "Unknown"
        assert problem["category"] == "custom"
        assert problem["examples"] == [] and problem["constraints"] == []


# ---------------------------------------------------------------------------
# Problem selection
# ---------------------------------------------------------------------------

class TestSelectProblem:

    def test_default_is_an_easy_array_problem(self):
        problem = select_problem(None)
        assert problem["category"] == "array"
        assert problem["difficulty"] == "Easy"

    def test_default_uses_random_choice(self):
        target = get_problem("two-sum")
        with patch("interviewer.problems.random") as mock_random:
            mock_random.choice.return_value = target
            assert select_problem(None) is target

    def test_category_config(self):
        problem = select_problem({"type": "category", "category": "tree", "difficulty": "Easy"})
        assert problem["id"] == "maximum-depth-binary-tree"

    def test_category_without_difficulty(self):
        problem = select_problem({"type": "category", "category": "sliding-window"})
        assert problem["id"] == "maximum-subarray"

    def test_category_with_no_match(self):
        with pytest.raises(ProblemSelectionError, match="No Hard problems found in array category"):
            select_problem({"type": "category", "category": "array", "difficulty": "Hard"})

    def test_url_config(self):
        problem = select_problem({"type": "url", "url": "https://leetcode.com/problems/add-two-numbers/"})
        assert problem["title"] == "Add Two Numbers"
        assert problem["category"] == "custom"

    def test_bad_url(self):
        with pytest.raises(ProblemSelectionError, match="Invalid LeetCode URL format"):
            select_problem({"type": "url", "url": "https://example.com"})

    def test_unknown_config_type(self):
        with pytest.raises(ProblemSelectionError, match="Failed to select a problem"):
            select_problem({"type": "random"})

    def test_non_object_config(self):
        with pytest.raises(ProblemSelectionError, match="Invalid problem configuration"):
            select_problem("two-sum")

    def test_empty_catalog(self, monkeypatch):
        monkeypatch.setattr(problems_module, "PROBLEMS", {})
        with pytest.raises(ProblemSelectionError, match="Failed to select a problem"):
            select_problem(None)

    def test_selection_error_is_a_value_error(self):
        assert issubclass(ProblemSelectionError, ValueError)


# ---------------------------------------------------------------------------
# Catalog validator script
# ---------------------------------------------------------------------------

class TestValidateProblemsScript:

    def test_reports_each_kind_of_issue(self, tmp_path):
        from scripts.validate_problems import validate_problem

        bad = {
            "id": "other-name",
            "title": "Broken",
            "difficulty": "Impossible",
            "description": "d",
            "examples": [{"input": "", "output": "1"}, "not an example"],
            "constraints": "n > 0",
        }
        kinds = {iss["kind"] for iss in validate_problem(bad, tmp_path / "broken.json")}
        assert kinds == {
            "missing_field", "invalid_difficulty", "name_mismatch",
            "invalid_example", "invalid_constraints",
        }

    def test_invalid_json_file(self, tmp_path):
        from scripts.validate_problems import validate_file

        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        assert [iss["kind"] for iss in validate_file(path)] == ["invalid_json"]

    def test_check_exits_nonzero_on_issues(self, tmp_path, capsys):
        from scripts.validate_problems import main

        (tmp_path / "bad.json").write_text(json.dumps({"id": "bad"}), encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["--check", str(tmp_path)])
        assert excinfo.value.code == 1
        assert "bad.json" in capsys.readouterr().out

    def test_check_passes_on_real_catalog(self, capsys):
        from scripts.validate_problems import main

        main(["--check"])
        assert "Total issues: 0" in capsys.readouterr().out
