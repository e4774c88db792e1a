"""Tests for CircleCI data models and display helpers."""

import unittest

from ci_bot.models import Build, BuildStatus, Project, to_display, to_project, to_sha

from .helpers import VCS_URL, make_build, make_project


class TestProjectResolution(unittest.TestCase):
    """Tests for to_project."""

    def test_bare_name_gets_default_org(self):
        self.assertEqual(to_project("widgets", "acme"), "acme/widgets")

    def test_qualified_name_unchanged(self):
        self.assertEqual(to_project("other/widgets", "acme"), "other/widgets")

    def test_no_default_org(self):
        self.assertEqual(to_project("widgets", ""), "widgets")
        self.assertEqual(to_project("widgets", None), "widgets")


class TestDisplayHelpers(unittest.TestCase):
    """Tests for to_sha and to_display."""

    def test_to_sha_truncates_to_seven(self):
        self.assertEqual(to_sha("abcdef1234567"), "abcdef1")

    def test_to_sha_short_revision(self):
        self.assertEqual(to_sha("abc"), "abc")
        self.assertEqual(to_sha(""), "")

    def test_to_display_uppercases_first_char_only(self):
        self.assertEqual(to_display("success"), "Success")
        self.assertEqual(to_display("infrastructure_fail"), "Infrastructure_fail")
        self.assertEqual(to_display("fAILED"), "FAILED")

    def test_to_display_empty(self):
        self.assertEqual(to_display(""), "")


class TestBuildStatus(unittest.TestCase):
    """Tests for BuildStatus normalization."""

    def test_known_value(self):
        self.assertIs(BuildStatus.parse("running"), BuildStatus.RUNNING)

    def test_unknown_and_missing_values(self):
        self.assertIs(BuildStatus.parse("exploded"), BuildStatus.UNKNOWN)
        self.assertIs(BuildStatus.parse(None), BuildStatus.UNKNOWN)
        self.assertIs(BuildStatus.parse(""), BuildStatus.UNKNOWN)

    def test_display(self):
        self.assertEqual(BuildStatus.NOT_RUN.display, "Not_run")


class TestBuild(unittest.TestCase):
    """Tests for Build parsing and formatting."""

    def test_describe(self):
        build = Build.from_api(make_build())
        self.assertEqual(
            build.describe(),
            f"Success in build 42 of {VCS_URL} [master/abcdef1] Jane: Fix bug - push",
        )

    def test_previous_build(self):
        build = Build.from_api(
            make_build(status="running", previous={"build_num": 41, "status": "failed"})
        )
        self.assertTrue(build.is_running)
        self.assertEqual(build.previous.build_num, 41)
        self.assertIs(build.previous.status, BuildStatus.FAILED)

    def test_missing_fields(self):
        build = Build.from_api({"build_num": 3})
        self.assertIs(build.status, BuildStatus.UNKNOWN)
        self.assertIsNone(build.previous)
        self.assertEqual(build.short_sha, "")


class TestProject(unittest.TestCase):
    """Tests for Project parsing."""

    def test_last_build_on_default_branch(self):
        project = Project.from_api(make_project("widgets", "failed", 7))
        self.assertEqual(project.slug, "acme/widgets")
        self.assertEqual(project.last_build().build_num, 7)
        self.assertIs(project.last_build().outcome, BuildStatus.FAILED)

    def test_no_builds(self):
        project = Project.from_api(
            {"username": "acme", "reponame": "empty", "default_branch": "main", "branches": {}}
        )
        self.assertIsNone(project.last_build())


if __name__ == "__main__":
    unittest.main()
