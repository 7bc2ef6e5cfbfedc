import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from nativebuilder import planner
from nativebuilder.errors import ManifestLookupError
from nativebuilder.matrix import Variant
from nativebuilder.platforms import Platform

LINUX_SDKS = [
    {"name": "clang-9", "platform": "linux", "architecture": "x64", "toolset_version": "9.0",
     "sysroot": "/opt/sysroot9", "gcc_toolchain": "/opt/gcc", "tools_path": "/opt/clang9/bin"},
    {"name": "clang-11", "platform": "linux", "architecture": "x64", "toolset_version": "11.0",
     "sysroot": "/opt/sysroot11", "gcc_toolchain": "/opt/gcc", "tools_path": "/opt/clang11/bin"},
]


class TestPlanBuild(unittest.TestCase):

    def setUp(self):
        self.project_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.project_dir)

    def _context(self, conf, host_platform):
        return planner.create_context(conf, path=self.project_dir, host_platform=host_platform, host_path=())

    def test_linux_plans_both_variants_with_newest_sdk(self):
        context = self._context({"sdks": LINUX_SDKS}, Platform.LINUX)
        plan = planner.plan_build(context)
        self.assertEqual([str(p.key) for p in plan.pipelines], ["linux/x64/debug", "linux/x64/release"])
        self.assertTrue(all(p.candidate.name == "clang-11" for p in plan.pipelines))
        data = plan.to_dict()
        self.assertEqual(len(data["configurations"]), 2)
        self.assertEqual(data["configurations"][1]["stages"], ["compile", "install", "configure", "package"])
        self.assertFalse(data["configurations"][0]["placeholder_sdk"])

    def test_single_variant(self):
        context = self._context({"sdks": LINUX_SDKS}, Platform.LINUX)
        plan = planner.plan_build(context, variants=(Variant.RELEASE,))
        self.assertEqual(len(plan.pipelines), 1)
        self.assertEqual(os.path.basename(plan.pipelines[0].artifact.path), "tbb-linux_intel64.7z")

    @patch("nativebuilder.sdks.logger")
    def test_no_sdk_plans_with_placeholder_and_warns_once(self, mock_logger):
        context = self._context({}, Platform.LINUX)
        plan = planner.plan_build(context)
        self.assertEqual(len(plan.pipelines), 2)
        self.assertTrue(all(p.candidate.is_placeholder for p in plan.pipelines))
        self.assertEqual(mock_logger.warning.call_count, 1)

    def test_windows_requires_manifest_entries(self):
        context = self._context({}, Platform.WINDOWS)
        with self.assertRaises(ManifestLookupError):
            planner.plan_build(context)

    @patch("nativebuilder.sdks.logger")
    def test_windows_with_manifest(self, mock_logger):
        with open(os.path.join(self.project_dir, "manifest.toml"), "w") as f:
            f.write('[artifacts]\n"vs2022-toolchain" = "14.29.30133"\nwin10sdk = "10.0.19041"\n')
        sdk = {"name": "vs2019", "platform": "windows", "architecture": "x64",
               "toolset_version": "14.29.30133", "secondary_version": "10.0.19041",
               "bin_paths": ["/vs/bin"], "include_paths": ["/vs/include"], "library_paths": ["/vs/lib"]}
        context = self._context({"sdks": [sdk]}, Platform.WINDOWS)
        plan = planner.plan_build(context)

        self.assertEqual(len(plan.pipelines), 4)
        by_key = {str(p.key): p for p in plan.pipelines}
        self.assertEqual(by_key["windows/x64/release"].candidate.name, "vs2019")
        self.assertTrue(by_key["windows/arm64/release"].candidate.is_placeholder)
        # One warning for the arm64 locator, shared by both variants.
        self.assertEqual(mock_logger.warning.call_count, 1)

    def test_project_settings_flow_into_plan(self):
        conf = {"sdks": LINUX_SDKS, "project": {"component": "mylib", "archive_extension": "zip", "jobs": 3}}
        context = self._context(conf, Platform.LINUX)
        plan = planner.plan_build(context, variants=(Variant.DEBUG,))
        pipeline = plan.pipelines[0]
        self.assertEqual(os.path.basename(pipeline.artifact.path), "mylib-linux_intel64-dbg.zip")
        self.assertIn("mylib_build_prefix=linux_intel64_dbg", pipeline.stage("compile").actions[0].arguments)
        self.assertIn("3", pipeline.stage("compile").actions[0].arguments)


if __name__ == '__main__':
    unittest.main()
